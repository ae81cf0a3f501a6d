"""
잡 핸들러 모듈

이 패키지 아래 모듈 중 register(registry) 함수를 가진 모듈은 워커 시작 시
worker.main.load_handlers()가 자동으로 불러 등록합니다.
"""
