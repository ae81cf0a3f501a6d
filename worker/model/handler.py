"""
핸들러 입출력 모델

모든 잡 입력/출력 모델은 JobInput/JobOutput을 상속합니다.
"""

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict

from common.task_metadata import TaskIdentifiers
from storage import S3StorageClient


class JobInput(BaseModel):
    """잡 입력 페이로드 기본 모델"""
    model_config = ConfigDict(extra='ignore', frozen=True)


class JobOutput(BaseModel):
    """잡 출력 페이로드 기본 모델 (dispatch 시 인스턴스도 다시 검증)"""
    model_config = ConfigDict(extra='forbid', revalidate_instances='always')


@dataclass(frozen=True)
class HandlerContext:
    """핸들러에 전달되는 실행 컨텍스트"""
    job_id: int
    assignment_id: int
    storage_uri: str  # 이 잡이 쓰기 허용된 스토리지 위치
    aws_region: str = "ap-southeast-2"
    s3_endpoint: str | None = None
    identity: TaskIdentifiers = field(default_factory=TaskIdentifiers)

    def storage_client(self) -> S3StorageClient:
        """컨텍스트의 리전/엔드포인트로 스토리지 클라이언트 생성"""
        return S3StorageClient(region=self.aws_region, s3_endpoint=self.s3_endpoint)


@dataclass(frozen=True)
class DispatchResult:
    """dispatch 결과 (잡 도메인 오류는 예외 대신 success=False로 표현)"""
    success: bool
    result_payload: dict[str, Any] | None = None
    error: str | None = None

    @classmethod
    def failed(cls, error: str) -> "DispatchResult":
        return cls(success=False, result_payload=None, error=error)
