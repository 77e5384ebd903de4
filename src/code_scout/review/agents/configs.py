"""리뷰 관점별 에이전트 설정."""

from dataclasses import dataclass


@dataclass(frozen=True)
class AgentConfig:
    """에이전트 설정.

    관점별 에이전트는 별도 코드 경로 없이 이 데이터만 다릅니다.
    """

    key: str  # 레지스트리 키 (예: "security")
    name: str  # 표시 이름
    model: str  # 모델 카탈로그 키 ("haiku" | "sonnet" | "opus")
    focus: str
    max_turns: int
    prompt_name: str  # 프롬프트 템플릿 이름 (예: "review/security")


SECURITY = AgentConfig(
    key="security",
    name="Security (Agentic)",
    model="opus",
    focus="Security vulnerabilities with codebase exploration",
    max_turns=10,
    prompt_name="review/security",
)

LOGIC = AgentConfig(
    key="logic",
    name="Logic (Agentic)",
    model="sonnet",
    focus="Business logic errors with codebase exploration",
    max_turns=8,
    prompt_name="review/logic",
)

PERFORMANCE = AgentConfig(
    key="performance",
    name="Performance (Agentic)",
    model="sonnet",
    focus="Performance issues with codebase exploration",
    max_turns=6,
    prompt_name="review/performance",
)

STYLE = AgentConfig(
    key="style",
    name="Style (Agentic)",
    model="haiku",
    focus="Code quality with pattern exploration",
    max_turns=5,
    prompt_name="review/style",
)
