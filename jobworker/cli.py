"""jobworker CLI"""

import argparse
import sys

from worker.config import load_config_from_env
from worker.exception import ConfigValidationError


def run_worker(settings_path: str | None, once: bool) -> int:
    """워커 실행"""
    from worker.main import main as worker_main

    return worker_main(settings_path=settings_path, once=once)


def show_config() -> int:
    """환경 변수 설정 검증 및 출력 (비밀번호는 마스킹)"""
    try:
        config = load_config_from_env()
    except ConfigValidationError as e:
        print(f"ConfigValidationError: {e}", file=sys.stderr)
        return 2

    print(f"API_ENDPOINT      = {config.api_endpoint}")
    print(f"JOB_TYPES         = {','.join(config.job_types)}")
    print(f"WORKER_USERNAME   = {config.username}")
    print("WORKER_PASSWORD   = ********")
    print(f"AWS_REGION        = {config.aws_region}")
    print(f"S3_ENDPOINT       = {config.s3_endpoint or '-'}")
    print(f"POLL_INTERVAL_MS  = {config.poll_interval_ms}")
    print(f"IDLE_TIMEOUT_MS   = {config.idle_timeout_ms}")
    return 0


def list_handlers() -> int:
    """등록된 잡 타입과 입출력 모델 출력"""
    from worker.main import build_registry

    registrations = build_registry().get_registrations()
    if not registrations:
        print("No handlers registered")
        return 0

    for job_type, reg in sorted(registrations.items()):
        print(
            f"{job_type}: handler={type(reg.handler).__name__}, "
            f"input={reg.input_model.__name__}, output={reg.output_model.__name__}"
        )
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="jobworker",
        description="jobworker - 원격 잡 큐 폴링 워커"
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # run command
    run_parser = subparsers.add_parser("run", help="Start the worker loop")
    run_parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single poll/claim/process iteration and exit"
    )
    run_parser.add_argument(
        "-s", "--settings",
        default=None,
        help="Settings YAML path (default: config/worker.yaml)"
    )

    # config command
    subparsers.add_parser("config", help="Validate and print environment configuration")

    # handlers command
    subparsers.add_parser("handlers", help="List registered job handlers")

    # version
    parser.add_argument("-v", "--version", action="version", version="%(prog)s 0.1.0")

    args = parser.parse_args(argv)

    if args.command == "run":
        return run_worker(args.settings, args.once)
    elif args.command == "config":
        return show_config()
    elif args.command == "handlers":
        return list_handlers()

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
