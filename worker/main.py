"""
Worker: 잡 큐 폴링 워커 모듈

원격 잡 큐를 폴링하여 설정된 잡 타입의 잡을 하나씩 claim/처리/보고하고,
설정된 시간 동안 활동이 없으면 스스로 종료합니다.

실행 방법:
    python -m worker.main
    python main.py
    jobworker run
"""

import asyncio
import importlib
import logging
import pkgutil
import signal
import sys
import time
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable

import httpx
from pydantic import ValidationError

from client import ApiClient, AuthSession, JobClient
from client.model import Credentials, Job
from common.task_metadata import TaskIdentifiers, get_task_metadata_safe
from worker.base import JobRegistry
from worker.config import WorkerConfig, WorkerSettings
from worker.exception import MalformedJobError
from worker.executor import Executor
from worker.model import WorkerRuntimeState, WorkerState

logger = logging.getLogger(__name__)

DEFAULT_ERROR_BACKOFF_SECONDS = 1.0
ERROR_BACKOFF_POLL_RATIO = 0.5


class Worker:
    """
    잡 큐 폴링 워커

    한 번에 하나의 잡만 처리합니다. 상태: IDLE -> POLLING -> PROCESSING -> ... -> SHUTTING_DOWN
    """

    def __init__(
        self,
        config: WorkerConfig,
        job_client: JobClient,
        registry: JobRegistry,
        identity: TaskIdentifiers | None = None,
        error_backoff_seconds: float = DEFAULT_ERROR_BACKOFF_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._config = config
        self._job_client = job_client
        self._registry = registry
        self._job_types = frozenset(config.job_types)
        self._clock = clock
        self._stop_event: asyncio.Event | None = None

        # 에러 백오프는 poll 간격의 절반 이하
        poll_interval = config.poll_interval_seconds
        if poll_interval > 0:
            self._error_backoff = min(error_backoff_seconds, poll_interval * ERROR_BACKOFF_POLL_RATIO)
        else:
            self._error_backoff = error_backoff_seconds

        # 워커 생성 이후 레지스트리는 읽기 전용
        registry.freeze()
        missing = sorted(t for t in self._job_types if t not in registry)
        if missing:
            logger.warning(f"No handler registered for configured job types: {missing}")

        self._executor = Executor(
            job_client=job_client,
            registry=registry,
            config=config,
            identity=identity or TaskIdentifiers(),
            on_activity=self._mark_activity,
        )
        self._runtime = WorkerRuntimeState(running=False, last_activity=clock())

    async def start(self) -> None:
        """워커 메인 루프 시작 (유휴 종료 또는 stop() 호출 시 반환)"""
        if self._runtime.running:
            logger.warning("Worker is already running")
            return

        self._stop_event = asyncio.Event()
        self._runtime = WorkerRuntimeState(running=True, last_activity=self._clock(), state=WorkerState.IDLE)

        logger.info(
            f"Worker started (job_types={sorted(self._job_types)}, "
            f"poll_interval={self._config.poll_interval_ms}ms, "
            f"idle_timeout={self._config.idle_timeout_ms}ms)"
        )

        try:
            await self._main_loop()
        finally:
            self._set_runtime(running=False, state=WorkerState.SHUTTING_DOWN)
            logger.info("Worker loop ended")

    async def stop(self) -> None:
        """Worker graceful shutdown (처리 중인 잡은 끝까지 처리)"""
        self.request_stop()

    def request_stop(self) -> None:
        """
        종료 요청 (동기 버전, 시그널 핸들러에서 호출)

        실행 중 플래그를 내리고 대기 중인 poll/백오프를 깨웁니다.
        """
        if not self._runtime.running:
            return

        logger.info("Stopping worker...")
        self._set_runtime(running=False)
        if self._stop_event:
            self._stop_event.set()

    async def run_once(self) -> bool:
        """
        한 번의 반복: poll -> (잡 선택 시) claim -> dispatch -> complete

        Returns:
            bool: 처리할 잡을 선택했는지 여부
        """
        self._set_runtime(state=WorkerState.POLLING)
        try:
            job = await self._poll_for_job()
        finally:
            self._set_runtime(state=WorkerState.IDLE)
        if job is None:
            return False

        self._mark_activity()
        self._set_runtime(state=WorkerState.PROCESSING)
        try:
            await self._executor.execute(job)
        finally:
            self._set_runtime(state=WorkerState.IDLE)
        return True

    async def _main_loop(self) -> None:
        """메인 폴링 루프"""
        while self._runtime.running:
            try:
                job_found = await self.run_once()
            except Exception as e:
                logger.error(f"Error in worker loop: {e}", exc_info=True)
                self._check_idle_timeout()
                # 지속적인 오류로 API를 두드리지 않도록 짧게 대기
                await self._wait(self._error_backoff)
                continue

            self._check_idle_timeout()

            # 잡을 찾았으면 바로 다음 poll
            if not job_found:
                await self._wait(self._config.poll_interval_seconds)

    async def _poll_for_job(self) -> Job | None:
        """처리 가능한 첫 번째 잡 반환 (없으면 None)"""
        logger.debug("Polling for a job")
        jobs = await self._job_client.poll()
        if not jobs:
            logger.debug("No jobs available in response")
            return None

        for index, raw in enumerate(jobs):
            try:
                job = self._parse_job(index, raw)
            except MalformedJobError as e:
                logger.warning(f"Skipping {e.message}")
                continue

            if job.type in self._job_types:
                logger.info(f"Found suitable job {job.id} of type {job.type}")
                return job
            logger.debug(f"Skipping job {index} of type {job.type} (not in our supported types)")

        logger.debug(f"No suitable jobs found among {len(jobs)} available jobs")
        return None

    @staticmethod
    def _parse_job(index: int, raw: Any) -> Job:
        try:
            return Job.model_validate(raw)
        except ValidationError as e:
            raise MalformedJobError(index, raw, str(e)) from e

    def _check_idle_timeout(self) -> None:
        """유휴 시간이 idle timeout 이상이면 종료 상태로 전환"""
        idle_timeout = self._config.idle_timeout_seconds
        if idle_timeout <= 0:
            return

        idle_time = self._clock() - self._runtime.last_activity
        logger.debug(f"Idle time {idle_time * 1000:.0f}ms, configured idle timeout {self._config.idle_timeout_ms}ms")
        if idle_time >= idle_timeout:
            logger.info(f"Worker idle for {idle_time * 1000:.0f}ms, shutting down...")
            self._set_runtime(running=False, state=WorkerState.SHUTTING_DOWN)

    def _mark_activity(self) -> None:
        now = self._clock()
        self._set_runtime(last_activity=max(now, self._runtime.last_activity))

    def _set_runtime(self, **changes) -> None:
        self._runtime = replace(self._runtime, **changes)

    async def _wait(self, seconds: float) -> None:
        """지정 시간 대기 (stop 시 즉시 종료)"""
        if not self._runtime.running:
            return
        if seconds <= 0 or self._stop_event is None:
            await asyncio.sleep(max(seconds, 0))
            return
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            pass  # 타임아웃이면 계속 폴링

    @property
    def is_running(self) -> bool:
        """실행 중 여부"""
        return self._runtime.running

    @property
    def state(self) -> WorkerState:
        return self._runtime.state

    @property
    def runtime(self) -> WorkerRuntimeState:
        """현재 실행 상태 스냅샷"""
        return self._runtime


def load_handlers(registry: JobRegistry) -> None:
    """worker.job 하위 모듈을 불러 register(registry)가 있으면 호출 (하위 폴더 재귀 탐색)"""
    from worker import job as job_pkg

    def load_recursive(package, prefix: str):
        for _, module_name, is_pkg in pkgutil.iter_modules(package.__path__):
            full_name = f"{prefix}.{module_name}"
            module = importlib.import_module(full_name)
            register = getattr(module, "register", None)
            if callable(register):
                register(registry)
                logger.debug(f"Loaded handler module: {full_name}")
            if is_pkg:
                load_recursive(module, full_name)

    load_recursive(job_pkg, "worker.job")


def build_registry() -> JobRegistry:
    """핸들러 모듈을 모두 등록한 레지스트리 생성"""
    registry = JobRegistry()
    load_handlers(registry)
    return registry


async def run_worker(
    config: WorkerConfig,
    settings: WorkerSettings,
    registry: JobRegistry | None = None,
    once: bool = False,
) -> None:
    """워커 구성 요소를 생성하고 유휴 종료(또는 시그널)까지 실행"""
    registry = registry or build_registry()
    runtime = settings.worker

    async with httpx.AsyncClient(timeout=runtime.http_timeout_seconds) as http_client:
        identity = await get_task_metadata_safe()

        credentials = Credentials(email=config.username, password=config.password)
        session = AuthSession(
            config.api_endpoint,
            credentials,
            http_client,
            refresh_threshold_seconds=runtime.token_refresh_threshold_seconds,
        )
        job_client = JobClient(ApiClient(config.api_endpoint, session, http_client))
        worker = Worker(
            config,
            job_client,
            registry,
            identity=identity,
            error_backoff_seconds=runtime.error_backoff_seconds,
        )

        if once:
            await worker.run_once()
            return

        loop = asyncio.get_running_loop()

        def signal_handler():
            logger.info("Received shutdown signal")
            worker.request_stop()

        # Windows는 add_signal_handler를 지원하지 않음
        if sys.platform != "win32":
            for sig in (signal.SIGINT, signal.SIGTERM):
                loop.add_signal_handler(sig, signal_handler)

        try:
            logger.info("Starting worker loop...")
            await worker.start()
        finally:
            if sys.platform != "win32":
                for sig in (signal.SIGINT, signal.SIGTERM):
                    loop.remove_signal_handler(sig)
            session.clear()
            logger.info("Worker closed itself")


def main(settings_path: str | Path | None = None, once: bool = False) -> int:
    """
    환경 변수/설정 파일을 읽어 워커 실행

    Returns:
        프로세스 종료 코드 (설정 오류 시 2)
    """
    from common.logging import setup_logging
    from worker.config import load_config_from_env, load_settings
    from worker.exception import ConfigValidationError

    try:
        settings = load_settings(settings_path)
        setup_logging(
            level=settings.logging.level,
            json_format=settings.logging.json_format,
            log_file=settings.logging.log_file,
        )
        logger.info("Initializing worker from environment variables...")
        config = load_config_from_env()
    except ConfigValidationError as e:
        print(f"ConfigValidationError: {e}", file=sys.stderr)
        return 2

    try:
        asyncio.run(run_worker(config, settings, once=once))
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user")
    return 0


if __name__ == "__main__":
    sys.exit(main())
