import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ValidationError

from worker.exception import (
    HandlerDispatchError,
    HandlerNotFoundError,
    InvalidInputError,
    InvalidOutputError,
    RegistryFrozenError,
)
from worker.model.handler import DispatchResult, HandlerContext, JobInput, JobOutput
from worker.model.job_type import JobType

__all__ = ['BaseHandler', 'HandlerRegistration', 'JobRegistry', 'HandlerNotFoundError']

logger = logging.getLogger(__name__)


class BaseHandler(ABC):
    """잡 핸들러 기본 클래스"""

    @abstractmethod
    async def execute(self, params: JobInput, context: HandlerContext) -> JobOutput:
        """
        잡 실행 로직

        Args:
            params: 등록된 입력 모델로 검증된 입력
            context: 스토리지 위치, 리전, 태스크 식별 정보

        Returns:
            등록된 출력 모델 인스턴스

        Raises:
            Exception: 실행 실패 시 예외 발생 (잡 실패로 보고됨)
        """
        pass


@dataclass(frozen=True)
class HandlerRegistration:
    """잡 타입별 등록 정보"""
    job_type: JobType
    handler: BaseHandler
    input_model: type[JobInput]
    output_model: type[JobOutput]


class JobRegistry:
    """
    잡 타입 -> {핸들러, 입력 모델, 출력 모델} 레지스트리

    워커 생성 시점에 한 번 구성하고 freeze() 이후에는 읽기 전용입니다.
    같은 잡 타입을 다시 등록하면 나중 등록이 덮어씁니다.
    """

    def __init__(self):
        self._registrations: dict[JobType, HandlerRegistration] = {}
        self._frozen = False

    def register(
        self,
        job_type: str | JobType,
        handler: BaseHandler,
        input_model: type[JobInput],
        output_model: type[JobOutput],
    ) -> None:
        """
        핸들러 등록

        Raises:
            RegistryFrozenError: freeze() 이후 호출 시
            UnknownJobTypeError: JobType에 없는 잡 타입
        """
        if self._frozen:
            raise RegistryFrozenError(str(job_type))

        job_type = JobType.parse(job_type)
        if job_type in self._registrations:
            logger.warning(f"Overwriting handler for job type: {job_type.value}")

        self._registrations[job_type] = HandlerRegistration(
            job_type=job_type,
            handler=handler,
            input_model=input_model,
            output_model=output_model,
        )
        logger.debug(f"Registered handler for job type: {job_type.value}")

    def handler(self, job_type: str | JobType, input_model: type[JobInput], output_model: type[JobOutput]):
        """핸들러 클래스 등록 데코레이터"""
        def decorator(cls):
            self.register(job_type, cls(), input_model, output_model)
            return cls
        return decorator

    def freeze(self) -> None:
        """이후 등록 차단"""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get_handler(self, job_type: str | JobType) -> HandlerRegistration:
        """
        잡 타입의 등록 정보 반환

        Raises:
            HandlerNotFoundError: 등록되지 않은 잡 타입 (UnknownJobTypeError 포함)
        """
        parsed = JobType.parse(job_type)
        registration = self._registrations.get(parsed)
        if registration is None:
            raise HandlerNotFoundError(parsed.value)
        return registration

    def get_registrations(self) -> dict[str, HandlerRegistration]:
        """등록된 핸들러 목록 반환"""
        return {job_type.value: reg for job_type, reg in self._registrations.items()}

    def job_types(self) -> list[str]:
        return [job_type.value for job_type in self._registrations]

    def __contains__(self, job_type: object) -> bool:
        try:
            return JobType.parse(job_type) in self._registrations
        except HandlerNotFoundError:
            return False

    def __len__(self) -> int:
        return len(self._registrations)

    async def dispatch(self, job_type: str, raw_input: Any, context: HandlerContext) -> DispatchResult:
        """
        잡 처리

        1. 핸들러 조회
        2. 입력 페이로드 검증 (raw -> 입력 모델)
        3. 핸들러 실행 (타임아웃 없음)
        4. 출력 모델 검증
        5. 전송용 dict로 직렬화 (비어 있으면 {})

        잡 도메인 오류는 예외로 전파하지 않고 success=False 결과로 반환합니다.
        """
        try:
            registration = self.get_handler(job_type)
            params = self._validate_input(registration, raw_input)

            logger.debug(f"Processing job of type: {job_type}")
            output = await registration.handler.execute(params, context)

            validated = self._validate_output(registration, output)
        except HandlerDispatchError as e:
            logger.error(f"Dispatch failed for job {context.job_id}: {e.message}")
            return DispatchResult.failed(e.message)
        except Exception as e:
            logger.error(f"Error processing job {context.job_id}: {e}", exc_info=True)
            return DispatchResult.failed(str(e))

        payload = self._serialize(validated)
        logger.debug(f"Parsed payload {payload}")
        return DispatchResult(success=True, result_payload=payload)

    def _validate_input(self, registration: HandlerRegistration, raw_input: Any) -> JobInput:
        """raw 입력을 등록된 입력 모델로 변환"""
        job_type = registration.job_type.value
        try:
            return registration.input_model.model_validate(raw_input)
        except ValidationError as e:
            logger.error(f"Input validation failed for job type {job_type}: {e}")
            raise InvalidInputError(job_type, str(e)) from e

    def _validate_output(self, registration: HandlerRegistration, output: Any) -> JobOutput:
        """
        핸들러 반환값 검증

        등록된 출력 모델 인스턴스여야 하며, 생성 이후 필드 대입이나 model_construct로
        스키마를 벗어난 값이 있으면 재검증에서 실패합니다.
        """
        job_type = registration.job_type.value
        if not isinstance(output, registration.output_model):
            detail = f"expected {registration.output_model.__name__}, got {type(output).__name__}"
            logger.error(f"Output validation failed for job type {job_type}: {detail}")
            raise InvalidOutputError(job_type, detail)

        try:
            return registration.output_model.model_validate(output)
        except ValidationError as e:
            logger.error(f"Output validation failed for job type {job_type}: {e}")
            raise InvalidOutputError(job_type, str(e)) from e

    @staticmethod
    def _serialize(output: BaseModel) -> dict[str, Any]:
        """출력 모델을 전송용 dict로 변환, 변환할 내용이 없으면 빈 dict"""
        try:
            payload = output.model_dump(mode="json")
        except (ValueError, TypeError) as e:
            logger.debug(f"Could not convert output into a dict, sending empty payload: {e}")
            return {}
        return payload if isinstance(payload, dict) and payload else {}
