"""
API 클라이언트 관련 예외 클래스 정의
"""

from typing import Any


class ApiError(Exception):
    """API 호출 기본 예외 (HTTP 상태 코드와 응답 본문 포함)"""
    def __init__(self, message: str, status_code: int | None = None, response: Any = None):
        self.message = message
        self.status_code = status_code
        self.response = response
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"{self.message} (status={self.status_code})"


class AuthenticationError(ApiError):
    """로그인 실패 (refresh 실패 후 재로그인 실패 포함)"""
    pass


class TransportError(ApiError):
    """네트워크 수준 실패 (연결 실패, 타임아웃 등)"""
    pass


class ProtocolError(ApiError):
    """응답 본문이 예상한 형태가 아님"""
    pass
