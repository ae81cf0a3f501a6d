"""
잡 타입 정의

API에 정의된 잡 타입과 일치해야 합니다. 새 잡 타입을 처리하려면 여기에 멤버를 추가하고
worker/job 아래에 핸들러 모듈을 작성합니다.
"""

from enum import Enum

from worker.exception import UnknownJobTypeError


class JobType(str, Enum):
    """처리 가능한 잡 타입"""
    TEST = "TEST"

    @classmethod
    def parse(cls, value: "str | JobType") -> "JobType":
        """
        문자열을 JobType으로 변환

        Raises:
            UnknownJobTypeError: 정의되지 않은 잡 타입
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise UnknownJobTypeError(str(value)) from None
