"""
인증 API 클라이언트

인증 엔드포인트를 제외한 모든 요청에 Bearer 토큰을 붙이고,
응답을 JSON으로 파싱하여 반환합니다.
"""

import logging
from typing import Any

import httpx

from client.auth import LOGIN_PATH, REFRESH_PATH, REGISTER_PATH, AuthSession
from client.exception import ApiError, ProtocolError, TransportError

logger = logging.getLogger(__name__)

_UNAUTHENTICATED_PATHS = (LOGIN_PATH, REGISTER_PATH, REFRESH_PATH)


def requires_auth(path: str) -> bool:
    """인증 헤더가 필요한 경로인지 여부"""
    return not path.rstrip("/").endswith(_UNAUTHENTICATED_PATHS)


class ApiClient:
    """인증 헤더를 자동으로 붙이는 JSON API 클라이언트"""

    def __init__(self, base_url: str, session: AuthSession, http_client: httpx.AsyncClient):
        self._base_url = base_url.rstrip("/")
        self._session = session
        self._http = http_client

    @property
    def session(self) -> AuthSession:
        return self._session

    async def get(self, path: str, params: dict | None = None) -> Any:
        return await self._request("GET", path, params=params)

    async def post(self, path: str, data: dict | None = None) -> Any:
        return await self._request("POST", path, data=data)

    async def put(self, path: str, data: dict | None = None) -> Any:
        return await self._request("PUT", path, data=data)

    async def patch(self, path: str, data: dict | None = None) -> Any:
        return await self._request("PATCH", path, data=data)

    async def delete(self, path: str) -> Any:
        return await self._request("DELETE", path)

    async def _request(
        self,
        method: str,
        path: str,
        data: dict | None = None,
        params: dict | None = None,
    ) -> Any:
        """
        요청 전송 및 응답 파싱

        Returns:
            파싱된 JSON 본문, 본문이 비어 있으면 None

        Raises:
            AuthenticationError: 토큰 확보 실패
            TransportError: 네트워크 실패
            ApiError: 2xx 이외 응답
            ProtocolError: JSON이 아닌 응답 본문
        """
        url = f"{self._base_url}{path}"
        headers = await self._session.auth_headers() if requires_auth(path) else {}

        try:
            response = await self._http.request(method, url, json=data, params=params, headers=headers)
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {path} failed: {e}") from e

        if not response.is_success:
            raise ApiError(f"{method} {path} failed", response.status_code, response.text)

        content = response.text
        logger.debug(f"Response content = {content}")
        if not content.strip():
            return None

        try:
            return response.json()
        except ValueError as e:
            raise ProtocolError(f"{method} {path} returned non-JSON body", response.status_code, content) from e
