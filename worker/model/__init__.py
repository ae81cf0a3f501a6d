"""Worker 모델"""
from worker.model.handler import DispatchResult, HandlerContext, JobInput, JobOutput
from worker.model.job_type import JobType
from worker.model.state import WorkerRuntimeState, WorkerState

__all__ = [
    "DispatchResult",
    "HandlerContext",
    "JobInput",
    "JobOutput",
    "JobType",
    "WorkerRuntimeState",
    "WorkerState",
]
