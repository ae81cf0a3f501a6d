"""
Job API 요청/응답 모델 정의
"""

from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class CompletionStatus(str, Enum):
    """잡 완료 보고 상태"""
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"


class Job(BaseModel):
    """poll 응답의 잡 엔티티 (수신 후 변경 불가)"""
    model_config = ConfigDict(frozen=True, extra='ignore')

    id: int
    type: str
    input_payload: Any = Field(
        default=None,
        validation_alias=AliasChoices('input_payload', 'inputPayload'),
    )


class JobAssignment(BaseModel):
    """claim 성공 시 생성되는 할당 정보"""
    model_config = ConfigDict(frozen=True, extra='ignore')

    id: int
    storage_uri: str = Field(validation_alias=AliasChoices('storage_uri', 'storageUri'))
    job_id: int | None = Field(default=None, validation_alias=AliasChoices('job_id', 'jobId'))


class JobAssignmentResponse(BaseModel):
    """POST /jobs/assign 응답"""
    model_config = ConfigDict(extra='ignore')

    assignment: JobAssignment | None = None


class ClaimRequest(BaseModel):
    """POST /jobs/assign 요청"""
    model_config = ConfigDict(populate_by_name=True)

    job_id: int = Field(serialization_alias='jobId')
    ecs_task_arn: str = Field(serialization_alias='ecsTaskArn')
    ecs_cluster_arn: str = Field(serialization_alias='ecsClusterArn')


class CompleteRequest(BaseModel):
    """POST /jobs/assignments/{id}/result 요청"""
    status: CompletionStatus
    result_payload: dict[str, Any] | None = Field(default=None, serialization_alias='resultPayload')
