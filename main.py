"""
jobworker 진입점

환경 변수로 설정된 워커를 실행합니다. 유휴 시간이 IDLE_TIMEOUT_MS를 넘으면 스스로 종료합니다.

사용법:
    python main.py                       # 워커 실행
    python main.py --once                # 한 번만 poll/처리 후 종료
    python main.py --settings my.yaml    # 설정 파일 지정
"""

import sys
import os

# Windows 인코딩 설정 (cp949 -> UTF-8)
if sys.platform == "win32":
    os.environ["PYTHONUTF8"] = "1"

import argparse

from worker.main import main


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run the job worker")
    parser.add_argument("--once", action="store_true", help="Process at most one job and exit")
    parser.add_argument("--settings", default=None, help="Settings YAML path")
    args = parser.parse_args()

    sys.exit(main(settings_path=args.settings, once=args.once))
