"""Review agents - 관점별 도구 사용 리뷰어들."""

from dataclasses import replace

from code_scout.shared.config import ModelConfig, ToolsConfig, default_models
from code_scout.shared.llm import BaseLLM

from .base import ReviewAgent, calculate_cost, extract_summary, parse_issues
from .configs import LOGIC, PERFORMANCE, SECURITY, STYLE, AgentConfig

__all__ = [
    "AgentConfig",
    "ReviewAgent",
    "AGENT_REGISTRY",
    "calculate_cost",
    "extract_summary",
    "parse_issues",
    "get_agent",
    "get_agent_config",
    "get_available_agents",
]

# 에이전트 레지스트리
AGENT_REGISTRY: dict[str, AgentConfig] = {
    config.key: config for config in (SECURITY, LOGIC, PERFORMANCE, STYLE)
}


def get_agent_config(name: str, max_turns: int | None = None) -> AgentConfig:
    """이름으로 에이전트 설정 조회.

    Args:
        name: 에이전트 이름 (예: "security", "logic")
        max_turns: 지정하면 최대 턴 수를 덮어쓴 사본을 반환

    Returns:
        AgentConfig 객체

    Raises:
        ValueError: 지원하지 않는 에이전트 이름이거나 max_turns가 1 미만인 경우
    """
    name = name.lower()

    if name not in AGENT_REGISTRY:
        available = ", ".join(get_available_agents())
        raise ValueError(
            f"지원하지 않는 에이전트입니다: {name}. 사용 가능한 에이전트: {available}"
        )

    config = AGENT_REGISTRY[name]
    if max_turns is not None:
        if max_turns < 1:
            raise ValueError(f"max_turns는 1 이상이어야 합니다: {max_turns}")
        config = replace(config, max_turns=max_turns)
    return config


def get_agent(
    name: str,
    llm: BaseLLM,
    models: dict[str, ModelConfig] | None = None,
    tools_config: ToolsConfig | None = None,
    min_confidence: int = 70,
    max_turns: int | None = None,
) -> ReviewAgent:
    """이름으로 에이전트 인스턴스 생성.

    Args:
        name: 에이전트 이름 (예: "security")
        llm: 사용할 LLM 인스턴스
        models: 모델 카탈로그. None이면 기본 카탈로그 사용.
        tools_config: 샌드박스 도구 제한
        min_confidence: 프롬프트에 안내할 최소 confidence
        max_turns: 최대 턴 수 덮어쓰기

    Returns:
        ReviewAgent 인스턴스

    Raises:
        ValueError: 지원하지 않는 에이전트이거나 모델이 카탈로그에 없는 경우

    Examples:
        >>> agent = get_agent("security", llm)
        >>> agent = get_agent("style", llm, max_turns=3)
    """
    config = get_agent_config(name, max_turns)
    catalog = models or default_models()

    if config.model not in catalog:
        raise ValueError(f"모델 설정을 찾을 수 없습니다: {config.model}")

    return ReviewAgent(
        config=config,
        llm=llm,
        model=catalog[config.model],
        tools_config=tools_config,
        min_confidence=min_confidence,
    )


def get_available_agents() -> list[str]:
    """사용 가능한 에이전트 이름 목록 반환.

    Examples:
        >>> get_available_agents()
        ['logic', 'performance', 'security', 'style']
    """
    return sorted(AGENT_REGISTRY.keys())
