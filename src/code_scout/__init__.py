"""Code-Scout: 코드베이스를 탐색하는 AI Multi-Agent 코드 리뷰 도구."""

__version__ = "0.1.0"
