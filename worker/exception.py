"""
Worker 관련 예외 클래스 정의
"""


class WorkerError(Exception):
    """Worker 기본 예외"""
    pass


class ConfigValidationError(WorkerError):
    """환경 설정 값 검증 실패 (시작 시점에만 발생)"""
    def __init__(self, field: str, message: str):
        self.field = field
        self.message = f"{field} - {message}"
        super().__init__(self.message)


class HandlerDispatchError(WorkerError):
    """잡 처리 경계에서 발생하는 예외 (항상 잡 단위 실패로 귀결)"""
    def __init__(self, job_type: str, message: str):
        self.job_type = job_type
        self.message = message
        super().__init__(self.message)


class HandlerNotFoundError(HandlerDispatchError):
    """핸들러를 찾을 수 없음"""
    def __init__(self, job_type: str):
        super().__init__(job_type, f"No handler registered for job type: {job_type}")


class UnknownJobTypeError(HandlerNotFoundError):
    """JobType enum에 정의되지 않은 잡 타입"""
    pass


class InvalidInputError(HandlerDispatchError):
    """입력 페이로드가 등록된 입력 모델과 맞지 않음"""
    def __init__(self, job_type: str, detail: str | None = None):
        super().__init__(job_type, f"Invalid input payload for job type: {job_type}")
        self.detail = detail


class InvalidOutputError(HandlerDispatchError):
    """핸들러 반환값이 등록된 출력 모델과 맞지 않음"""
    def __init__(self, job_type: str, detail: str | None = None):
        super().__init__(job_type, f"Invalid output for job type: {job_type}")
        self.detail = detail


class MalformedJobError(WorkerError):
    """poll 결과의 개별 항목을 Job으로 파싱할 수 없음"""
    def __init__(self, index: int, raw_data, reason: str):
        self.index = index
        self.raw_data = raw_data
        self.message = f"Malformed job at index {index}: {reason}"
        super().__init__(self.message)


class RegistryFrozenError(WorkerError):
    """워커 생성 이후 레지스트리 변경 시도"""
    def __init__(self, job_type: str):
        self.job_type = job_type
        self.message = f"Registry is frozen, cannot register job type: {job_type}"
        super().__init__(self.message)
