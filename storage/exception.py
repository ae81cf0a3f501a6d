"""
Storage 관련 예외 클래스 정의
"""


class StorageError(Exception):
    """Storage 기본 예외"""
    pass


class StorageUriError(StorageError):
    """스토리지 URI 형식 오류 (scheme://bucket/path 형태가 아님)"""
    def __init__(self, uri: str, message: str | None = None):
        self.uri = uri
        self.message = message or f"Invalid storage URI format: {uri}"
        super().__init__(self.message)
