"""
인증 세션 모듈

자격 증명과 현재 토큰 쌍을 소유하며, 호출자가 만료 시점을 신경 쓰지 않도록
유효한 액세스 토큰을 제공합니다.

상태 전이:
    Unauthenticated --login--> Authenticated
    Authenticated --(만료 임박)--> Refreshing --> Authenticated
    Refreshing --(어떤 실패든)--> Unauthenticated --login--> Authenticated
"""

import logging
import time
from typing import Callable

import httpx
import jwt

from client.exception import ApiError, AuthenticationError
from client.model.auth import AuthTokenPair, Credentials, LoginResponse, RefreshResponse

logger = logging.getLogger(__name__)

LOGIN_PATH = "/auth/login"
REGISTER_PATH = "/auth/register"
REFRESH_PATH = "/auth/token"

DEFAULT_REFRESH_THRESHOLD_SECONDS = 60


class AuthSession:
    """
    로그인/토큰 갱신 세션

    토큰 쌍은 이 클래스만 변경하며, 변경 시에는 항상 새 AuthTokenPair로 통째로 교체합니다.
    """

    def __init__(
        self,
        base_url: str,
        credentials: Credentials,
        http_client: httpx.AsyncClient,
        refresh_threshold_seconds: float = DEFAULT_REFRESH_THRESHOLD_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            base_url: API 기본 URL (예: https://example.com/api)
            credentials: 로그인 자격 증명
            http_client: 공유 httpx 클라이언트
            refresh_threshold_seconds: 만료까지 남은 시간이 이 값 이하이면 갱신
            clock: 현재 unix 시각(초) 반환 함수
        """
        self._base_url = base_url.rstrip("/")
        self._credentials = credentials
        self._http = http_client
        self._refresh_threshold = refresh_threshold_seconds
        self._clock = clock
        self._tokens: AuthTokenPair | None = None

    @property
    def tokens(self) -> AuthTokenPair | None:
        """현재 토큰 쌍 (없으면 None)"""
        return self._tokens

    @property
    def is_authenticated(self) -> bool:
        return self._tokens is not None

    def clear(self) -> None:
        """토큰 쌍 폐기"""
        self._tokens = None

    async def get_valid_token(self) -> str:
        """
        유효한 액세스 토큰 반환

        토큰이 없으면 로그인하고, 만료가 refresh threshold 이내이면 갱신합니다.

        Raises:
            AuthenticationError: 로그인(또는 갱신 실패 후 재로그인) 실패 시
        """
        if self._tokens is None:
            logger.debug("Logging in")
            await self.login()
            return self._tokens.token

        expires_in = self.seconds_until_expiry(self._tokens.token)
        if expires_in is None:
            logger.warning("Could not read token expiry, refreshing")
            await self.refresh()
        elif expires_in <= self._refresh_threshold:
            logger.debug(f"Token expires in {expires_in:.0f} seconds, refreshing now")
            await self.refresh()

        return self._tokens.token

    def seconds_until_expiry(self, token: str) -> float | None:
        """
        토큰의 exp 클레임까지 남은 시간(초)

        서명은 검증하지 않습니다. 토큰은 발급자에게 그대로 되돌려 보내기만 하므로
        만료 시각만 읽으면 됩니다.

        Returns:
            남은 초, 디코딩 불가하거나 exp가 숫자가 아니면 None
        """
        try:
            claims = jwt.decode(token, options={"verify_signature": False})
        except jwt.PyJWTError as e:
            logger.debug(f"Failed to decode token: {e}")
            return None

        exp = claims.get("exp")
        if isinstance(exp, bool) or not isinstance(exp, (int, float)):
            return None
        return exp - self._clock()

    async def login(self) -> AuthTokenPair:
        """
        자격 증명으로 로그인하여 새 토큰 쌍 저장

        Raises:
            AuthenticationError: 200 이외 응답(상태/본문 포함) 또는 전송 실패(500)
        """
        url = f"{self._base_url}{LOGIN_PATH}"
        payload = {
            "email": self._credentials.email,
            "password": self._credentials.password,
        }

        try:
            response = await self._http.post(url, json=payload)
        except httpx.HTTPError as e:
            logger.error(f"Login request failed: {e}")
            raise AuthenticationError("Failed to login", 500) from e

        if response.status_code != 200:
            raise AuthenticationError("Login failed", response.status_code, response.text)

        try:
            data = LoginResponse.model_validate(response.json())
        except ValueError as e:
            raise AuthenticationError("Invalid login response", 500, response.text) from e

        self._tokens = AuthTokenPair(token=data.token, refresh_token=data.refresh_token)
        logger.info(f"Logged in as {self._credentials.email}")
        return self._tokens

    async def refresh(self) -> AuthTokenPair:
        """
        리프레시 토큰으로 액세스 토큰 갱신

        리프레시 토큰이 없으면 바로 로그인합니다. 갱신 중 어떤 실패가 발생해도
        (네트워크, 200 이외 응답, 파싱 실패) 토큰 쌍을 버리고 다시 로그인하므로,
        호출자에게 전파되는 것은 재로그인 실패뿐입니다.

        Raises:
            AuthenticationError: 재로그인 실패 시
        """
        current = self._tokens
        if current is None or current.refresh_token is None:
            logger.debug("No refresh token, logging in...")
            return await self.login()

        url = f"{self._base_url}{REFRESH_PATH}"
        try:
            response = await self._http.post(url, json={"refreshToken": current.refresh_token})
            if response.status_code != 200:
                raise ApiError("Non 200 response from refresh token", response.status_code, response.text)
            data = RefreshResponse.model_validate(response.json())
        except (httpx.HTTPError, ApiError, ValueError) as e:
            logger.info(f"Token refresh failed, logging in again: {e}")
            self._tokens = None
            return await self.login()

        self._tokens = AuthTokenPair(token=data.token, refresh_token=current.refresh_token)
        logger.debug("Token refresh completed")
        return self._tokens

    async def auth_headers(self) -> dict[str, str]:
        """Authorization 헤더"""
        token = await self.get_valid_token()
        return {"Authorization": f"Bearer {token}"}
