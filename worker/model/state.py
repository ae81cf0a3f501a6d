"""
Worker 모델 - 실행 상태 구조체
"""

from dataclasses import dataclass
from enum import Enum


class WorkerState(str, Enum):
    """워커 루프 상태"""
    IDLE = "IDLE"
    POLLING = "POLLING"
    PROCESSING = "PROCESSING"
    SHUTTING_DOWN = "SHUTTING_DOWN"


@dataclass(frozen=True)
class WorkerRuntimeState:
    """워커 실행 상태 (필드 단위 수정 없이 replace로 통째 교체)"""
    running: bool
    last_activity: float  # time.monotonic() 기준
    state: WorkerState = WorkerState.IDLE
