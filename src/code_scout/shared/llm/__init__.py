"""LLM adapters - LLM 제공자 어댑터."""

from code_scout.shared.config import LLMConfig

from .anthropic import AnthropicLLM
from .base import BaseLLM, ModelTransportError
from .openai import OpenAILLM

__all__ = [
    "BaseLLM",
    "ModelTransportError",
    "OpenAILLM",
    "AnthropicLLM",
    "get_llm",
    "get_llm_from_config",
]


def get_llm(provider: str = "anthropic", **kwargs) -> BaseLLM:
    """제공자 이름에 따라 적절한 LLM 인스턴스 반환.

    Args:
        provider: LLM 제공자. "anthropic" 또는 "openai".
        **kwargs: LLM 생성에 전달할 추가 파라미터
            (api_key, api_key_env, temperature, timeout_seconds, max_retries)

    Returns:
        BaseLLM 인스턴스

    Raises:
        ValueError: 지원하지 않는 제공자인 경우.

    Examples:
        >>> llm = get_llm("anthropic")
        >>> llm = get_llm("openai", api_key_env="OPENAI_API_KEY")
    """
    provider = provider.lower()

    if provider == "anthropic":
        return AnthropicLLM(**kwargs)
    elif provider == "openai":
        return OpenAILLM(**kwargs)
    else:
        raise ValueError(
            f"지원하지 않는 LLM 제공자입니다: {provider}. "
            "'anthropic' 또는 'openai'를 사용하세요."
        )


def get_llm_from_config(config: LLMConfig) -> BaseLLM:
    """LLMConfig로부터 LLM 인스턴스 생성."""
    return get_llm(
        config.provider,
        api_key_env=config.api_key_env,
        temperature=config.temperature,
        timeout_seconds=config.timeout_seconds,
        max_retries=config.max_retries,
    )
