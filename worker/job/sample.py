"""TEST 잡 핸들러 - 새 잡 타입 작성 시 참고용 예제"""

import asyncio
import logging

from pydantic import Field

from worker.base import BaseHandler, JobRegistry
from worker.model import HandlerContext, JobInput, JobOutput, JobType

logger = logging.getLogger(__name__)


class TestInput(JobInput):
    """TEST 잡 입력"""
    id: int
    sleep_seconds: float = Field(default=0.0, ge=0)  # 처리 시간 시뮬레이션


class TestOutput(JobOutput):
    """TEST 잡 출력 (빈 페이로드)"""


class TestHandler(BaseHandler):
    """TEST 잡 핸들러"""

    async def execute(self, params: TestInput, context: HandlerContext) -> TestOutput:
        logger.debug(f"Processing test job with id: {params.id}")

        if params.sleep_seconds:
            await asyncio.sleep(params.sleep_seconds)

        logger.debug(f"Finished test job with id: {params.id}")
        logger.debug(f"Could write something to {context.storage_uri} if desired.")
        return TestOutput()


def register(registry: JobRegistry) -> None:
    registry.register(JobType.TEST, TestHandler(), TestInput, TestOutput)
