"""jobworker - 원격 잡 큐 폴링 워커"""

__version__ = "0.1.0"
