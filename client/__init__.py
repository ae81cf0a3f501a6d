"""Job API 클라이언트 - 인증 세션, poll/claim/complete"""
from client.api import ApiClient, requires_auth
from client.auth import AuthSession
from client.exception import ApiError, AuthenticationError, ProtocolError, TransportError
from client.job_client import JobClient

__all__ = [
    "ApiClient",
    "AuthSession",
    "JobClient",
    "requires_auth",
    # Exceptions
    "ApiError",
    "AuthenticationError",
    "ProtocolError",
    "TransportError",
]
