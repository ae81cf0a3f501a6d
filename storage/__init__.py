"""Storage 모듈 - 잡 결과물 업로드"""
from storage.client import S3StorageClient, parse_storage_uri
from storage.exception import StorageError, StorageUriError

__all__ = [
    "S3StorageClient",
    "parse_storage_uri",
    "StorageError",
    "StorageUriError",
]
