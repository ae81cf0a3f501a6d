"""
스토리지 클라이언트

잡 결과물을 할당받은 스토리지 위치(s3://bucket/path)에 업로드합니다.
S3_ENDPOINT가 지정되면 MinIO 등 S3 호환 엔드포인트를 사용합니다.
"""

import logging
import os
import re
from pathlib import Path

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from storage.exception import StorageError, StorageUriError

logger = logging.getLogger(__name__)

_STORAGE_URI_PATTERN = re.compile(r"^([a-z0-9]+)://([^/]+)/(.*)$")


def parse_storage_uri(uri: str) -> tuple[str, str, str]:
    """
    스토리지 URI를 (scheme, bucket, path)로 분리

    Raises:
        StorageUriError: scheme://bucket/path 형식이 아닐 때
    """
    match = _STORAGE_URI_PATTERN.match(uri)
    if match is None:
        raise StorageUriError(uri)
    scheme, bucket, path = match.groups()
    return scheme, bucket, path


class S3StorageClient:
    """S3 (및 S3 호환) 스토리지 클라이언트"""

    def __init__(self, region: str, s3_endpoint: str | None = None, client=None):
        """
        Args:
            region: AWS 리전
            s3_endpoint: S3 호환 엔드포인트 (MinIO 등, 미지정 시 AWS 기본)
            client: 미리 생성된 boto3 S3 클라이언트 (미지정 시 최초 사용 시 생성)
        """
        self.region = region
        self.s3_endpoint = s3_endpoint
        self._client = client

    def _get_client(self):
        if self._client is not None:
            return self._client

        kwargs = {"region_name": self.region}
        if self.s3_endpoint:
            username = os.environ.get("MINIO_USERNAME")
            password = os.environ.get("MINIO_PASSWORD")
            if not username or not password:
                raise StorageError("MINIO_USERNAME and MINIO_PASSWORD are required when S3_ENDPOINT is set")
            kwargs.update(
                endpoint_url=self.s3_endpoint,
                aws_access_key_id=username,
                aws_secret_access_key=password,
            )

        self._client = boto3.client("s3", **kwargs)
        return self._client

    def upload_file(self, local_path: str | Path, storage_uri: str) -> str:
        """
        로컬 파일을 지정한 스토리지 URI로 업로드

        Returns:
            업로드한 스토리지 URI

        Raises:
            StorageUriError: URI 형식 오류 또는 s3 이외 scheme
            StorageError: 업로드 실패
        """
        scheme, bucket, key = parse_storage_uri(storage_uri)
        if scheme != "s3":
            raise StorageUriError(storage_uri, f"Expected S3 URI, got {scheme}")

        logger.debug(f"Uploading file from {local_path} to {storage_uri}")
        try:
            self._get_client().upload_file(str(local_path), bucket, key)
        except (BotoCoreError, ClientError, OSError) as e:
            logger.error(f"Failed to upload file to S3: {e}")
            raise StorageError(f"Failed to upload {local_path} to {storage_uri}: {e}") from e

        logger.debug(f"Uploaded file to {storage_uri}")
        return storage_uri

    def upload_directory(self, local_dir: str | Path, base_uri: str) -> list[str]:
        """
        디렉터리 내 모든 파일을 base_uri 아래 같은 상대 경로로 업로드

        Returns:
            업로드한 스토리지 URI 목록 (상대 경로 순)
        """
        local_dir = Path(local_dir)
        if not local_dir.is_dir():
            raise StorageError(f"Not a directory: {local_dir}")

        scheme, bucket, base_path = parse_storage_uri(base_uri)
        prefix = base_path.rstrip("/")

        uploaded = []
        for file_path in sorted(p for p in local_dir.rglob("*") if p.is_file()):
            relative = file_path.relative_to(local_dir).as_posix()
            key = f"{prefix}/{relative}" if prefix else relative
            uploaded.append(self.upload_file(file_path, f"{scheme}://{bucket}/{key}"))

        logger.info(f"Uploaded {len(uploaded)} files from {local_dir} to {base_uri}")
        return uploaded
