"""
공용 테스트 픽스처

FakeJobApi는 httpx.MockTransport 핸들러로 잡 큐 API(/auth, /jobs)를 흉내 냅니다.
"""

import json
import sys
import time
from pathlib import Path
from typing import Callable

import httpx
import jwt
import pytest
import pytest_asyncio

# 프로젝트 루트 경로 추가
sys.path.insert(0, str(Path(__file__).parent.parent))

from client import ApiClient, AuthSession, JobClient
from client.model import Credentials

BASE_URL = "http://api.test/api"
JWT_SECRET = "test-secret"


def make_token(expires_in: float = 3600, exp: float | None = None, **claims) -> str:
    """HS256 서명 JWT 생성 (exp 직접 지정 가능)"""
    payload = {
        "id": "1",
        "email": "worker@example.com",
        "roles": ["ADMIN"],
        "exp": int(exp if exp is not None else time.time() + expires_in),
    }
    payload.update(claims)
    return jwt.encode(payload, JWT_SECRET, algorithm="HS256")


class FakeJobApi:
    """잡 큐 API 가짜 구현 (요청 기록 포함)"""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.jobs: list = []
        self.assignment: dict | None = {"id": 100, "storage_uri": "s3://bucket/jobs/100"}
        self.login_status = 200
        self.refresh_status = 200
        self.token_ttl = 3600
        self.login_count = 0
        self.refresh_count = 0
        self.overrides: dict[str, Callable[[httpx.Request], httpx.Response]] = {}
        self.on_poll: Callable[[], None] | None = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        override = self.overrides.get(path)
        if override is not None:
            return override(request)

        if path == "/api/auth/login":
            self.login_count += 1
            if self.login_status != 200:
                return httpx.Response(self.login_status, json={"message": "Unauthorized"})
            return httpx.Response(200, json={
                "token": make_token(self.token_ttl, login=self.login_count),
                "refreshToken": f"refresh-{self.login_count}",
            })

        if path == "/api/auth/token":
            self.refresh_count += 1
            if self.refresh_status != 200:
                return httpx.Response(self.refresh_status, json={"message": "Invalid refresh token"})
            return httpx.Response(200, json={"token": make_token(self.token_ttl, refreshed=self.refresh_count)})

        if path == "/api/jobs/poll":
            if self.on_poll is not None:
                self.on_poll()
            return httpx.Response(200, json={"jobs": self.jobs})

        if path == "/api/jobs/assign":
            if self.assignment is None:
                return httpx.Response(200, content=b"")
            body = json.loads(request.content)
            return httpx.Response(200, json={"assignment": {**self.assignment, "job_id": body["jobId"]}})

        if path.startswith("/api/jobs/assignments/") and path.endswith("/result"):
            return httpx.Response(200, json={"ok": True})

        return httpx.Response(404, json={"message": f"Unknown path {path}"})

    def calls(self, path: str) -> list[httpx.Request]:
        """경로별 요청 목록"""
        return [r for r in self.requests if r.url.path == f"/api{path}"]

    def bodies(self, path: str) -> list[dict]:
        """경로별 요청 본문 (JSON)"""
        return [json.loads(r.content) for r in self.calls(path)]

    def result_calls(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith("/result")]


@pytest.fixture
def fake_api():
    return FakeJobApi()


@pytest.fixture
def credentials():
    return Credentials(email="worker@example.com", password="secret")


@pytest_asyncio.fixture
async def http_client(fake_api):
    async with httpx.AsyncClient(transport=httpx.MockTransport(fake_api)) as client:
        yield client


@pytest_asyncio.fixture
async def session(http_client, credentials):
    return AuthSession(BASE_URL, credentials, http_client)


@pytest_asyncio.fixture
async def job_client(session, http_client):
    return JobClient(ApiClient(BASE_URL, session, http_client))
