"""
잡 실행기 모듈

선택된 잡 하나의 claim -> dispatch -> complete를 담당합니다.
"""

import logging
from typing import Callable

from client import ApiError, AuthenticationError, JobClient
from client.model import Job, JobAssignment
from common.task_metadata import TaskIdentifiers
from worker.base import JobRegistry
from worker.config import WorkerConfig
from worker.model import DispatchResult, HandlerContext

logger = logging.getLogger(__name__)


class Executor:
    """잡 실행기"""

    def __init__(
        self,
        job_client: JobClient,
        registry: JobRegistry,
        config: WorkerConfig,
        identity: TaskIdentifiers,
        on_activity: Callable[[], None],
    ):
        self._job_client = job_client
        self._registry = registry
        self._config = config
        self._identity = identity
        self._on_activity = on_activity

    async def execute(self, job: Job) -> bool:
        """
        잡 실행

        Args:
            job: poll에서 선택된 잡

        Returns:
            bool: 핸들러 처리 성공 여부 (claim 실패 시 False)

        Raises:
            AuthenticationError: claim 중 인증 실패 (반복 경계에서 처리)
        """
        # 1. claim
        assignment = await self._claim(job)
        if assignment is None:
            logger.warning(f"Failed to claim job {job.id}")
            return False
        self._on_activity()

        # 2. 핸들러 실행
        logger.info(f"Processing job {job.id} with handler for type {job.type}")
        context = HandlerContext(
            job_id=job.id,
            assignment_id=assignment.id,
            storage_uri=assignment.storage_uri,
            aws_region=self._config.aws_region,
            s3_endpoint=self._config.s3_endpoint,
            identity=self._identity,
        )
        result = await self._registry.dispatch(job.type, job.input_payload, context)

        # 3. 결과 보고
        await self._complete(job, assignment, result)
        return result.success

    async def _claim(self, job: Job) -> JobAssignment | None:
        """잡 할당 (다른 워커가 먼저 가져간 경우 등은 None)"""
        try:
            assignment = await self._job_client.claim(job, self._identity)
        except AuthenticationError:
            raise
        except ApiError as e:
            logger.error(f"Error claiming job {job.id}: {e}")
            return None

        if assignment is not None:
            logger.info(f"Claimed job {job.id}, assignment {assignment.id}")
        return assignment

    async def _complete(self, job: Job, assignment: JobAssignment, result: DispatchResult) -> None:
        """처리 결과 보고 (실패 시 로그만 남기고 재시도하지 않음)"""
        logger.info(f"Completing job {job.id}")
        try:
            await self._job_client.complete(assignment.id, result.success, result.result_payload)
        except ApiError as e:
            logger.error(f"Error completing job {job.id}: {e}")
            return

        status = "SUCCESS" if result.success else "FAILURE"
        logger.info(f"Job {job.id} completed with status: {status}")
        self._on_activity()
