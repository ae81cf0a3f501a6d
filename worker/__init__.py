"""Worker 모듈 - 잡 폴링 루프, 핸들러 레지스트리"""
