"""API 클라이언트 모델"""
from client.model.auth import AuthTokenPair, Credentials, LoginResponse, RefreshResponse
from client.model.job import (
    ClaimRequest,
    CompleteRequest,
    CompletionStatus,
    Job,
    JobAssignment,
    JobAssignmentResponse,
)

__all__ = [
    # Auth
    "AuthTokenPair",
    "Credentials",
    "LoginResponse",
    "RefreshResponse",
    # Job
    "ClaimRequest",
    "CompleteRequest",
    "CompletionStatus",
    "Job",
    "JobAssignment",
    "JobAssignmentResponse",
]
