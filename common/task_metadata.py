"""
실행 환경(ECS Fargate) 태스크 식별 정보 조회

ECS Task Metadata Endpoint V4에서 태스크 ARN, 클러스터 등 식별자를 가져옵니다.
관리형 실행 환경 밖(로컬 등)에서는 모든 필드가 None입니다.
"""

import logging
import os
from dataclasses import dataclass

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError

logger = logging.getLogger(__name__)

METADATA_URI_ENV = "ECS_CONTAINER_METADATA_URI_V4"


class TaskMetadataError(Exception):
    """태스크 메타데이터 조회 실패"""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


@dataclass(frozen=True)
class TaskIdentifiers:
    """ECS 태스크 식별자 (모두 선택)"""
    task_id: str | None = None
    task_arn: str | None = None
    cluster_arn: str | None = None
    task_family: str | None = None
    task_revision: int | None = None
    availability_zone: str | None = None


class TaskMetadataResponse(BaseModel):
    """Task Metadata Endpoint V4 /task 응답 중 사용하는 필드"""
    model_config = ConfigDict(extra='ignore')

    TaskARN: str
    Family: str
    Revision: int
    Cluster: str
    AvailabilityZone: str


async def get_task_metadata(
    http_client: httpx.AsyncClient | None = None,
    metadata_uri: str | None = None,
) -> TaskIdentifiers:
    """
    현재 태스크의 식별 정보 조회

    Args:
        http_client: 사용할 httpx 클라이언트 (미지정 시 임시 생성)
        metadata_uri: 메타데이터 엔드포인트 (미지정 시 환경 변수 사용)

    Raises:
        TaskMetadataError: ECS 환경이 아니거나 조회/파싱 실패 시
    """
    metadata_uri = metadata_uri or os.environ.get(METADATA_URI_ENV)
    if not metadata_uri:
        raise TaskMetadataError("Not running in ECS environment - metadata URI not found")

    url = f"{metadata_uri.rstrip('/')}/task"
    try:
        if http_client is None:
            async with httpx.AsyncClient(timeout=5.0) as client:
                response = await client.get(url)
        else:
            response = await http_client.get(url)
    except httpx.HTTPError as e:
        raise TaskMetadataError(f"Failed to retrieve ECS task metadata: {e}") from e

    if response.status_code != 200:
        raise TaskMetadataError(f"Failed to retrieve ECS task metadata: {response.status_code}")

    try:
        metadata = TaskMetadataResponse.model_validate(response.json())
    except (ValueError, ValidationError) as e:
        raise TaskMetadataError(f"Failed to parse ECS task metadata: {e}") from e

    # ARN 마지막 세그먼트가 태스크 ID
    task_id = metadata.TaskARN.rsplit("/", 1)[-1] or "unknown"

    return TaskIdentifiers(
        task_id=task_id,
        task_arn=metadata.TaskARN,
        cluster_arn=metadata.Cluster,
        task_family=metadata.Family,
        task_revision=metadata.Revision,
        availability_zone=metadata.AvailabilityZone,
    )


async def get_task_metadata_safe(
    http_client: httpx.AsyncClient | None = None,
    metadata_uri: str | None = None,
) -> TaskIdentifiers:
    """get_task_metadata와 같지만 실패 시 빈 TaskIdentifiers 반환"""
    try:
        return await get_task_metadata(http_client, metadata_uri)
    except TaskMetadataError as e:
        logger.warning(f"Failed to get task metadata, falling back to empty identifiers: {e}")
        return TaskIdentifiers()
