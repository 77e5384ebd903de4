"""Anthropic LLM 어댑터 구현."""

import logging
import os
from typing import Any

from anthropic import AnthropicError, AsyncAnthropic

from code_scout.shared.models import (
    ContentBlock,
    LLMResponse,
    Message,
    StopReason,
    TextBlock,
    ThinkingBlock,
    ToolResultBlock,
    ToolUseBlock,
)

from .base import BaseLLM, ModelTransportError

logger = logging.getLogger(__name__)

_STOP_REASONS = {
    "end_turn": StopReason.END_TURN,
    "stop_sequence": StopReason.END_TURN,
    "max_tokens": StopReason.MAX_TOKENS,
    "tool_use": StopReason.TOOL_USE,
}


class AnthropicLLM(BaseLLM):
    """Anthropic Messages API를 사용하는 LLM 어댑터.

    환경변수 ANTHROPIC_API_KEY에서 API 키를 로드합니다.
    """

    def __init__(
        self,
        api_key: str | None = None,
        api_key_env: str = "ANTHROPIC_API_KEY",
        temperature: float = 0.3,
        timeout_seconds: float = 300.0,
        max_retries: int = 2,
    ) -> None:
        """Anthropic LLM 초기화.

        Args:
            api_key: API 키. None이면 환경변수에서 로드.
            api_key_env: API 키를 읽을 환경변수 이름.
            temperature: 생성 온도. extended thinking 사용 시에는 전달하지 않음.
            timeout_seconds: 요청당 타임아웃 (초).
            max_retries: SDK 재시도 횟수.

        Raises:
            ValueError: API 키가 설정되지 않은 경우.
        """
        self._api_key = api_key or os.environ.get(api_key_env)
        if not self._api_key:
            raise ValueError(
                "Anthropic API 키가 필요합니다. "
                f"환경변수 {api_key_env}를 설정하거나 api_key 파라미터를 전달하세요."
            )

        self._temperature = temperature
        self._client = AsyncAnthropic(
            api_key=self._api_key,
            timeout=timeout_seconds,
            max_retries=max_retries,
        )

    async def create_message(
        self,
        messages: list[Message],
        tools: list[dict[str, Any]],
        model: str,
        max_tokens: int,
        thinking_budget: int | None = None,
    ) -> LLMResponse:
        """Messages API 호출."""
        create_kwargs: dict[str, Any] = {
            "model": model,
            "max_tokens": max_tokens,
            "messages": [self._to_api_message(m) for m in messages],
            "tools": tools,
        }

        if thinking_budget:
            create_kwargs["thinking"] = {
                "type": "enabled",
                "budget_tokens": thinking_budget,
            }
        else:
            create_kwargs["temperature"] = self._temperature

        try:
            response = await self._client.messages.create(**create_kwargs)
        except AnthropicError as e:
            raise ModelTransportError(f"Anthropic API 호출 실패: {e}") from e

        stop_reason = _STOP_REASONS.get(response.stop_reason)
        if stop_reason is None:
            logger.debug(f"알 수 없는 stop_reason: {response.stop_reason}")
            stop_reason = StopReason.END_TURN

        return LLMResponse(
            content=[self._from_api_block(b) for b in response.content],
            stop_reason=stop_reason,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
        )

    def get_provider_name(self) -> str:
        return "anthropic"

    def _to_api_message(self, message: Message) -> dict[str, Any]:
        """Message를 API 요청 형식으로 변환."""
        content = []
        for block in message.content:
            if isinstance(block, TextBlock):
                content.append({"type": "text", "text": block.text})
            elif isinstance(block, ThinkingBlock):
                if block.redacted:
                    content.append({"type": "redacted_thinking", "data": block.thinking})
                else:
                    content.append(
                        {
                            "type": "thinking",
                            "thinking": block.thinking,
                            "signature": block.signature,
                        }
                    )
            elif isinstance(block, ToolUseBlock):
                content.append(
                    {
                        "type": "tool_use",
                        "id": block.id,
                        "name": block.name,
                        "input": block.input,
                    }
                )
            elif isinstance(block, ToolResultBlock):
                content.append(
                    {
                        "type": "tool_result",
                        "tool_use_id": block.tool_use_id,
                        "content": block.content,
                        "is_error": block.is_error,
                    }
                )
        return {"role": message.role, "content": content}

    def _from_api_block(self, block: Any) -> ContentBlock:
        """응답 블록을 ContentBlock으로 변환."""
        if block.type == "tool_use":
            return ToolUseBlock(id=block.id, name=block.name, input=dict(block.input))
        if block.type == "thinking":
            return ThinkingBlock(thinking=block.thinking, signature=block.signature)
        if block.type == "redacted_thinking":
            return ThinkingBlock(thinking=block.data, redacted=True)
        return TextBlock(text=getattr(block, "text", ""))
