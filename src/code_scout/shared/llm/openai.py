"""OpenAI LLM 어댑터 구현."""

import json
import logging
import os
from typing import Any

from openai import AsyncOpenAI, OpenAIError

from code_scout.shared.models import (
    ContentBlock,
    LLMResponse,
    Message,
    StopReason,
    TextBlock,
    ToolResultBlock,
    ToolUseBlock,
)

from .base import BaseLLM, ModelTransportError

logger = logging.getLogger(__name__)

_FINISH_REASONS = {
    "stop": StopReason.END_TURN,
    "length": StopReason.MAX_TOKENS,
    "tool_calls": StopReason.TOOL_USE,
}


class OpenAILLM(BaseLLM):
    """OpenAI Chat Completions API를 사용하는 LLM 어댑터.

    도구 스키마와 대화를 function calling 형식으로 변환합니다.
    extended thinking은 지원하지 않으므로 thinking_budget은 무시됩니다.
    """

    def __init__(
        self,
        api_key: str | None = None,
        api_key_env: str = "OPENAI_API_KEY",
        temperature: float = 0.3,
        timeout_seconds: float = 300.0,
        max_retries: int = 2,
    ) -> None:
        """OpenAI LLM 초기화.

        Raises:
            ValueError: API 키가 설정되지 않은 경우.
        """
        self._api_key = api_key or os.environ.get(api_key_env)
        if not self._api_key:
            raise ValueError(
                "OpenAI API 키가 필요합니다. "
                f"환경변수 {api_key_env}를 설정하거나 api_key 파라미터를 전달하세요."
            )

        self._temperature = temperature
        self._client = AsyncOpenAI(
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
        """Chat Completions API 호출."""
        api_messages: list[dict[str, Any]] = []
        for message in messages:
            api_messages.extend(self._to_api_messages(message))

        try:
            response = await self._client.chat.completions.create(
                model=model,
                messages=api_messages,
                tools=[self._to_api_tool(t) for t in tools],
                temperature=self._temperature,
                max_tokens=max_tokens,
            )
        except OpenAIError as e:
            raise ModelTransportError(f"OpenAI API 호출 실패: {e}") from e

        choice = response.choices[0]
        content: list[ContentBlock] = []
        if choice.message.content:
            content.append(TextBlock(text=choice.message.content))

        for tool_call in choice.message.tool_calls or []:
            try:
                arguments = json.loads(tool_call.function.arguments or "{}")
            except json.JSONDecodeError:
                logger.warning(f"도구 인자 파싱 실패: {tool_call.function.arguments}")
                arguments = {}
            content.append(
                ToolUseBlock(
                    id=tool_call.id,
                    name=tool_call.function.name,
                    input=arguments,
                )
            )

        usage = response.usage
        return LLMResponse(
            content=content,
            stop_reason=_FINISH_REASONS.get(choice.finish_reason, StopReason.END_TURN),
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
        )

    def get_provider_name(self) -> str:
        return "openai"

    def _to_api_tool(self, tool: dict[str, Any]) -> dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": tool["name"],
                "description": tool["description"],
                "parameters": tool["input_schema"],
            },
        }

    def _to_api_messages(self, message: Message) -> list[dict[str, Any]]:
        """Message 하나를 chat 메시지 목록으로 변환.

        도구 결과는 tool 역할 메시지로 분리됩니다.
        """
        if message.role == "assistant":
            api_message: dict[str, Any] = {
                "role": "assistant",
                "content": message.text or None,
            }
            if message.tool_uses:
                api_message["tool_calls"] = [
                    {
                        "id": block.id,
                        "type": "function",
                        "function": {
                            "name": block.name,
                            "arguments": json.dumps(block.input),
                        },
                    }
                    for block in message.tool_uses
                ]
            return [api_message]

        result: list[dict[str, Any]] = [
            {
                "role": "tool",
                "tool_call_id": block.tool_use_id,
                "content": block.content,
            }
            for block in message.content
            if isinstance(block, ToolResultBlock)
        ]
        if message.text:
            result.append({"role": "user", "content": message.text})
        return result
