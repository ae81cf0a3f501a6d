"""
Job API 클라이언트

워커의 의도(poll/claim/complete)를 인증된 HTTP 호출로 변환합니다.
"""

import logging
from typing import Any

from pydantic import ValidationError

from client.api import ApiClient
from client.exception import ProtocolError
from client.model.job import (
    ClaimRequest,
    CompleteRequest,
    CompletionStatus,
    Job,
    JobAssignment,
    JobAssignmentResponse,
)
from common.task_metadata import TaskIdentifiers

logger = logging.getLogger(__name__)

POLL_PATH = "/jobs/poll"
ASSIGN_PATH = "/jobs/assign"
RESULT_PATH = "/jobs/assignments/{assignment_id}/result"

UNKNOWN_IDENTIFIER = "Unknown - metadata lookup failure"


class JobClient:
    """잡 큐 API 클라이언트"""

    def __init__(self, api: ApiClient):
        self._api = api

    async def poll(self) -> list[Any]:
        """
        처리 대기 중인 잡 목록 조회

        Returns:
            응답의 jobs 목록 (파싱하지 않은 원본, 비어 있을 수 있음)

        Raises:
            ProtocolError: 응답에 jobs 목록이 없을 때
        """
        response = await self._api.get(POLL_PATH)
        logger.debug(f"Response from jobs poll: {response}")

        if not isinstance(response, dict) or not isinstance(response.get("jobs"), list):
            raise ProtocolError("Poll response does not contain a jobs list", response=response)
        return response["jobs"]

    async def claim(self, job: Job, identity: TaskIdentifiers) -> JobAssignment | None:
        """
        잡 할당 요청

        다른 워커가 먼저 가져간 경우처럼 응답이 비어 있으면 None을 반환합니다.

        Raises:
            ApiError: HTTP 실패 시 (호출자가 claim 실패로 처리)
            ProtocolError: assignment 형태가 잘못된 경우
        """
        request = ClaimRequest(
            job_id=job.id,
            ecs_task_arn=identity.task_arn or UNKNOWN_IDENTIFIER,
            ecs_cluster_arn=identity.cluster_arn or UNKNOWN_IDENTIFIER,
        )
        response = await self._api.post(ASSIGN_PATH, request.model_dump(by_alias=True))
        logger.debug(f"Assignment response {response}")

        if not response:
            logger.error(f"Failed job assignment for job {job.id}, there was no response")
            return None

        try:
            parsed = JobAssignmentResponse.model_validate(response)
        except ValidationError as e:
            raise ProtocolError(f"Invalid assignment response for job {job.id}: {e}", response=response) from e

        if parsed.assignment is None:
            logger.warning(f"Assignment response for job {job.id} has no assignment")
        return parsed.assignment

    async def complete(
        self,
        assignment_id: int,
        success: bool,
        result_payload: dict[str, Any] | None = None,
    ) -> None:
        """잡 처리 결과 보고 (재시도 없음)"""
        request = CompleteRequest(
            status=CompletionStatus.SUCCEEDED if success else CompletionStatus.FAILED,
            result_payload=result_payload,
        )
        path = RESULT_PATH.format(assignment_id=assignment_id)
        await self._api.post(path, request.model_dump(mode="json", by_alias=True))
