"""
App layer: 웹 서버 (FastAPI).

역할:
- OAuth 로그인, 세션 관리
- 폴더 트리 조회, 업로드, 이동, 검색
- AI 폴더 배치 추천, 채팅 명령
"""
