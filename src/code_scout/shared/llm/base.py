"""LLM 추상 베이스 클래스."""

from abc import ABC, abstractmethod
from typing import Any

from code_scout.shared.models import LLMResponse, Message


class ModelTransportError(Exception):
    """모델 API 호출 실패 (네트워크, 인증, 서버 오류 등).

    도구 실패와 달리 에이전트 루프 안에서 복구하지 않습니다.
    """

    pass


class BaseLLM(ABC):
    """LLM 어댑터의 추상 베이스 클래스.

    모든 LLM 제공자 구현체는 이 클래스를 상속해야 합니다.
    """

    @abstractmethod
    async def create_message(
        self,
        messages: list[Message],
        tools: list[dict[str, Any]],
        model: str,
        max_tokens: int,
        thinking_budget: int | None = None,
    ) -> LLMResponse:
        """대화 전체와 도구 스키마를 보내고 응답 한 건을 받습니다.

        Args:
            messages: 지금까지의 대화 (user / assistant 메시지)
            tools: 도구 스키마 목록 ({name, description, input_schema})
            model: 모델 ID
            max_tokens: 최대 출력 토큰 수
            thinking_budget: extended thinking 토큰 예산. None이면 비활성.

        Returns:
            LLMResponse 객체

        Raises:
            ModelTransportError: API 호출이 실패한 경우
        """
        ...

    @abstractmethod
    def get_provider_name(self) -> str:
        """제공자 이름 반환 (예: "anthropic")."""
        ...
