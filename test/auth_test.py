"""
AuthSession 테스트

테스트 항목:
1. 토큰이 없으면 로그인
2. 로그인 직후에는 refresh 하지 않음
3. exp - now <= threshold 일 때만 refresh
4. refresh 실패(비 200, 네트워크, 파싱) 시 재로그인
5. 재로그인도 실패하면 AuthenticationError 전파
6. 로그인 실패 시 상태 코드/본문 포함

실행: python -m pytest test/auth_test.py -v
"""

import httpx
import pytest

from client import AuthenticationError, AuthSession
from conftest import BASE_URL, make_token


class TestLogin:
    """login() 테스트"""

    @pytest.mark.asyncio
    async def test_get_valid_token_logs_in_when_no_tokens(self, session, fake_api):
        """토큰이 없으면 로그인 후 액세스 토큰 반환"""
        assert session.tokens is None

        token = await session.get_valid_token()

        assert fake_api.login_count == 1
        assert token == session.tokens.token
        assert session.tokens.refresh_token == "refresh-1"
        assert fake_api.bodies("/auth/login") == [{"email": "worker@example.com", "password": "secret"}]

    @pytest.mark.asyncio
    async def test_login_request_has_no_bearer_header(self, session, fake_api):
        """로그인 요청에는 Authorization 헤더가 없음"""
        await session.login()

        assert "authorization" not in fake_api.calls("/auth/login")[0].headers

    @pytest.mark.asyncio
    async def test_login_without_refresh_token(self, session, fake_api):
        """refreshToken이 없는 로그인 응답도 허용"""
        fake_api.overrides["/api/auth/login"] = lambda r: httpx.Response(200, json={"token": make_token()})

        tokens = await session.login()

        assert tokens.refresh_token is None

    @pytest.mark.asyncio
    async def test_login_failure_raises_with_status_and_body(self, session, fake_api):
        """401 응답 시 상태 코드와 본문을 포함한 AuthenticationError"""
        fake_api.login_status = 401

        with pytest.raises(AuthenticationError) as exc_info:
            await session.get_valid_token()

        assert exc_info.value.status_code == 401
        assert "Unauthorized" in exc_info.value.response
        assert session.tokens is None

    @pytest.mark.asyncio
    async def test_login_transport_failure_is_status_500(self, credentials):
        """네트워크 실패는 500 AuthenticationError"""
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            session = AuthSession(BASE_URL, credentials, client)
            with pytest.raises(AuthenticationError) as exc_info:
                await session.login()

        assert exc_info.value.status_code == 500
        assert exc_info.value.response is None

    @pytest.mark.asyncio
    async def test_login_invalid_body(self, session, fake_api):
        """200이지만 token이 없는 응답"""
        fake_api.overrides["/api/auth/login"] = lambda r: httpx.Response(200, json={"unexpected": True})

        with pytest.raises(AuthenticationError):
            await session.login()


class TestTokenRefresh:
    """만료 임박 시 refresh 테스트"""

    @pytest.mark.asyncio
    async def test_no_refresh_directly_after_login(self, session, fake_api):
        """로그인 직후 재호출 시 refresh 없음"""
        first = await session.get_valid_token()
        second = await session.get_valid_token()

        assert first == second
        assert fake_api.login_count == 1
        assert fake_api.refresh_count == 0

    @pytest.mark.asyncio
    async def test_refresh_at_threshold(self, http_client, credentials, fake_api):
        """exp - now == threshold 이면 refresh"""
        clock_now = 1_000_000.0
        session = AuthSession(BASE_URL, credentials, http_client, refresh_threshold_seconds=60, clock=lambda: clock_now)
        fake_api.overrides["/api/auth/login"] = lambda r: httpx.Response(200, json={
            "token": make_token(exp=clock_now + 60),
            "refreshToken": "refresh-abc",
        })

        await session.login()
        token = await session.get_valid_token()

        assert fake_api.refresh_count == 1
        assert fake_api.bodies("/auth/token") == [{"refreshToken": "refresh-abc"}]
        assert session.tokens.token == token
        # refresh 후에도 같은 리프레시 토큰 유지
        assert session.tokens.refresh_token == "refresh-abc"

    @pytest.mark.asyncio
    async def test_no_refresh_above_threshold(self, http_client, credentials, fake_api):
        """exp - now > threshold 이면 refresh 없음"""
        clock_now = 1_000_000.0
        session = AuthSession(BASE_URL, credentials, http_client, refresh_threshold_seconds=60, clock=lambda: clock_now)
        login_token = make_token(exp=clock_now + 61)
        fake_api.overrides["/api/auth/login"] = lambda r: httpx.Response(200, json={
            "token": login_token,
            "refreshToken": "refresh-abc",
        })

        await session.login()
        token = await session.get_valid_token()

        assert token == login_token
        assert fake_api.refresh_count == 0

    @pytest.mark.asyncio
    async def test_expired_token_is_refreshed(self, session, fake_api):
        """이미 만료된 토큰도 서명 검증 없이 exp만 읽어 refresh"""
        fake_api.token_ttl = -10
        await session.login()
        fake_api.token_ttl = 3600

        await session.get_valid_token()

        assert fake_api.refresh_count == 1
        assert fake_api.login_count == 1

    @pytest.mark.asyncio
    async def test_undecodable_token_triggers_refresh(self, session, fake_api):
        """디코딩할 수 없는 토큰은 만료된 것으로 취급"""
        fake_api.overrides["/api/auth/login"] = lambda r: httpx.Response(200, json={
            "token": "not-a-jwt",
            "refreshToken": "refresh-abc",
        })
        await session.login()

        await session.get_valid_token()

        assert fake_api.refresh_count == 1

    @pytest.mark.asyncio
    async def test_bearer_header_uses_current_token(self, session):
        headers = await session.auth_headers()

        assert headers == {"Authorization": f"Bearer {session.tokens.token}"}


class TestRefreshFallback:
    """refresh 실패 시 재로그인 테스트"""

    async def _login_with_expiring_token(self, session, fake_api):
        fake_api.token_ttl = 5
        await session.login()
        fake_api.token_ttl = 3600

    @pytest.mark.asyncio
    async def test_refresh_non_200_falls_back_to_login(self, session, fake_api):
        """refresh 401 -> 토큰 폐기 후 재로그인"""
        await self._login_with_expiring_token(session, fake_api)
        fake_api.refresh_status = 401

        token = await session.get_valid_token()

        assert fake_api.refresh_count == 1
        assert fake_api.login_count == 2
        assert session.tokens.refresh_token == "refresh-2"
        assert token == session.tokens.token

    @pytest.mark.asyncio
    async def test_refresh_network_error_falls_back_to_login(self, session, fake_api):
        """refresh 네트워크 오류 -> 재로그인"""
        await self._login_with_expiring_token(session, fake_api)

        def refresh_fails(request):
            raise httpx.ReadTimeout("timed out", request=request)

        fake_api.overrides["/api/auth/token"] = refresh_fails

        await session.get_valid_token()

        assert fake_api.login_count == 2
        assert session.tokens.refresh_token == "refresh-2"

    @pytest.mark.asyncio
    async def test_refresh_parse_error_falls_back_to_login(self, session, fake_api):
        """refresh 응답 파싱 실패 -> 재로그인"""
        await self._login_with_expiring_token(session, fake_api)
        fake_api.overrides["/api/auth/token"] = lambda r: httpx.Response(200, content=b"<html>oops</html>")

        await session.get_valid_token()

        assert fake_api.login_count == 2

    @pytest.mark.asyncio
    async def test_refresh_without_refresh_token_logs_in(self, session, fake_api):
        """리프레시 토큰이 없으면 바로 로그인"""
        fake_api.overrides["/api/auth/login"] = lambda r: httpx.Response(200, json={"token": make_token(5)})
        await session.login()

        await session.refresh()

        assert fake_api.refresh_count == 0
        assert len(fake_api.calls("/auth/login")) == 2

    @pytest.mark.asyncio
    async def test_refresh_and_login_failure_propagates(self, session, fake_api):
        """refresh 실패 후 재로그인도 실패하면 AuthenticationError 전파"""
        await self._login_with_expiring_token(session, fake_api)
        fake_api.refresh_status = 500
        fake_api.login_status = 403

        with pytest.raises(AuthenticationError) as exc_info:
            await session.get_valid_token()

        assert exc_info.value.status_code == 403
        assert session.tokens is None

    @pytest.mark.asyncio
    async def test_clear_drops_tokens(self, session):
        await session.login()
        assert session.is_authenticated

        session.clear()

        assert not session.is_authenticated
