"""
인증 관련 모델 정의
"""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class Credentials(BaseModel):
    """로그인 자격 증명 (프로세스 수명 동안 불변)"""
    model_config = ConfigDict(frozen=True)

    email: str
    password: str = Field(repr=False)


class AuthTokenPair(BaseModel):
    """액세스/리프레시 토큰 쌍 (부분 수정 없이 통째로 교체)"""
    model_config = ConfigDict(frozen=True)

    token: str = Field(repr=False)
    refresh_token: str | None = Field(default=None, repr=False)


class LoginResponse(BaseModel):
    """POST /auth/login 응답"""
    model_config = ConfigDict(extra='ignore')

    token: str
    refresh_token: str | None = Field(
        default=None,
        validation_alias=AliasChoices('refreshToken', 'refresh_token'),
    )


class RefreshResponse(BaseModel):
    """POST /auth/token 응답"""
    model_config = ConfigDict(extra='ignore')

    token: str
