"""공통 모듈 - 로깅, 실행 환경 메타데이터"""
