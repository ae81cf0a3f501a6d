"""
워커 설정

필수 설정은 환경 변수에서 읽고(load_config_from_env), 환경 변수 계약에 없는
운영 파라미터(로깅, 에러 백오프 등)는 config/worker.yaml에서 읽습니다(load_settings).
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from worker.exception import ConfigValidationError

logger = logging.getLogger(__name__)

DEFAULT_AWS_REGION = "ap-southeast-2"
DEFAULT_POLL_INTERVAL_MS = 2 * 1000
DEFAULT_IDLE_TIMEOUT_MS = 5 * 60 * 1000
DEFAULT_SETTINGS_PATH = Path(__file__).parent.parent / "config" / "worker.yaml"


@dataclass(frozen=True)
class WorkerConfig:
    """워커 설정 (환경 변수에서 로드)"""
    api_endpoint: str
    job_types: tuple[str, ...]
    username: str
    password: str = field(repr=False)
    poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS
    idle_timeout_ms: int = DEFAULT_IDLE_TIMEOUT_MS  # 0이면 유휴 종료 안 함
    aws_region: str = DEFAULT_AWS_REGION
    s3_endpoint: str | None = None  # S3 호환 스토리지용

    @property
    def poll_interval_seconds(self) -> float:
        return self.poll_interval_ms / 1000

    @property
    def idle_timeout_seconds(self) -> float:
        return self.idle_timeout_ms / 1000


def _get_env(env: Mapping[str, str], key: str, required: bool = True) -> str | None:
    value = env.get(key)
    if value is None and required:
        raise ConfigValidationError(key, "Required environment variable not set")
    return value


def _validate_url(url: str, field_name: str) -> str:
    if not url.startswith(("http://", "https://")):
        raise ConfigValidationError(field_name, f"Invalid URL format: {url}")
    return url


def _parse_int(value: str | None, field_name: str, default: int, min_value: int = 0) -> int:
    if value is None or value.strip() == "":
        return default
    try:
        parsed = int(value.strip())
    except ValueError:
        raise ConfigValidationError(field_name, f"Cannot parse '{value}' as integer") from None
    if parsed < min_value:
        raise ConfigValidationError(field_name, f"Value must be at least {min_value}")
    return parsed


def load_config_from_env(env: Mapping[str, str] | None = None) -> WorkerConfig:
    """
    환경 변수에서 설정 로드

    Args:
        env: 환경 변수 매핑 (미지정 시 os.environ)

    Raises:
        ConfigValidationError: 필수 값 누락 또는 형식 오류
    """
    env = os.environ if env is None else env

    # API 엔드포인트 (/api 하위 경로 사용)
    raw_endpoint = _get_env(env, "API_ENDPOINT").strip()
    _validate_url(raw_endpoint, "API_ENDPOINT")
    api_endpoint = f"{raw_endpoint.rstrip('/')}/api"

    job_types = tuple(t.strip() for t in _get_env(env, "JOB_TYPES").split(","))
    if not job_types or any(not t for t in job_types):
        raise ConfigValidationError("JOB_TYPES", "At least one non-empty job type must be specified")

    username = _get_env(env, "WORKER_USERNAME")
    if not username:
        raise ConfigValidationError("WORKER_USERNAME", "Username cannot be empty")
    password = _get_env(env, "WORKER_PASSWORD")
    if not password:
        raise ConfigValidationError("WORKER_PASSWORD", "Password cannot be empty")

    aws_region = _get_env(env, "AWS_REGION", required=False)
    if not aws_region:
        aws_region = DEFAULT_AWS_REGION
        logger.warning(f"AWS_REGION environment variable not set, defaulting to {aws_region}")

    s3_endpoint = _get_env(env, "S3_ENDPOINT", required=False) or None
    if s3_endpoint:
        _validate_url(s3_endpoint, "S3_ENDPOINT")

    poll_interval_ms = _parse_int(
        _get_env(env, "POLL_INTERVAL_MS", required=False), "POLL_INTERVAL_MS", DEFAULT_POLL_INTERVAL_MS
    )
    idle_timeout_ms = _parse_int(
        _get_env(env, "IDLE_TIMEOUT_MS", required=False), "IDLE_TIMEOUT_MS", DEFAULT_IDLE_TIMEOUT_MS
    )

    return WorkerConfig(
        api_endpoint=api_endpoint,
        job_types=job_types,
        username=username,
        password=password,
        poll_interval_ms=poll_interval_ms,
        idle_timeout_ms=idle_timeout_ms,
        aws_region=aws_region,
        s3_endpoint=s3_endpoint,
    )


class LoggingSettings(BaseModel):
    """로깅 설정"""
    level: str = "INFO"
    json_format: bool = True
    log_file: str | None = None

    @field_validator("level")
    @classmethod
    def _check_level(cls, value: str) -> str:
        value = value.upper()
        if not isinstance(logging.getLevelName(value), int):
            raise ValueError(f"Unknown log level: {value}")
        return value


class RuntimeSettings(BaseModel):
    """워커 런타임 파라미터"""
    error_backoff_seconds: float = Field(default=1.0, gt=0, le=60)
    token_refresh_threshold_seconds: float = Field(default=60, ge=0)
    http_timeout_seconds: float = Field(default=30.0, gt=0)


class WorkerSettings(BaseModel):
    """config/worker.yaml 전체"""
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    worker: RuntimeSettings = Field(default_factory=RuntimeSettings)


def load_settings(path: str | Path | None = None) -> WorkerSettings:
    """
    YAML 설정 파일 로드 (파일이 없으면 기본값)

    Raises:
        ConfigValidationError: YAML 파싱 실패 또는 값 검증 실패
    """
    path = Path(path) if path else DEFAULT_SETTINGS_PATH
    if not path.exists():
        logger.debug(f"Settings file not found, using defaults: {path}")
        return WorkerSettings()

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        return WorkerSettings.model_validate(data)
    except yaml.YAMLError as e:
        raise ConfigValidationError(str(path), f"Cannot parse YAML: {e}") from e
    except ValidationError as e:
        raise ConfigValidationError(str(path), f"Invalid settings: {e}") from e
