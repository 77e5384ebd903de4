"""공통 데이터 모델 정의."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

# ============================================================
# 공통 Enum
# ============================================================


class Severity(Enum):
    """이슈 심각도.

    심각도는 confidence로부터만 결정되며 독립적으로 지정하지 않습니다.
    """

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @classmethod
    def from_confidence(cls, confidence: int) -> "Severity":
        """confidence(0-100)를 심각도로 변환.

        Args:
            confidence: 모델이 보고한 신뢰도

        Returns:
            90 이상 CRITICAL, 80 이상 HIGH, 70 이상 MEDIUM, 나머지 LOW
        """
        if confidence >= 90:
            return cls.CRITICAL
        if confidence >= 80:
            return cls.HIGH
        if confidence >= 70:
            return cls.MEDIUM
        return cls.LOW


class ChangeType(Enum):
    """파일 변경 타입."""

    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"


class OutputFormat(Enum):
    """출력 형식."""

    CONSOLE = "console"
    JSON = "json"
    MARKDOWN = "markdown"


class ReviewOutcome(Enum):
    """에이전트 실행의 종료 상태."""

    COMPLETED = "completed"
    TRUNCATED_BY_TOKEN_LIMIT = "truncated_by_token_limit"
    TRUNCATED_BY_TURN_LIMIT = "truncated_by_turn_limit"
    FAILED = "failed"


class StopReason(Enum):
    """모델 응답의 종료 사유."""

    END_TURN = "end_turn"
    MAX_TOKENS = "max_tokens"
    TOOL_USE = "tool_use"


# ============================================================
# Diff / PR 관련 모델
# ============================================================


@dataclass
class DiffHunk:
    """Diff hunk (변경 블록)."""

    old_start: int
    old_count: int
    new_start: int
    new_count: int
    content: str


@dataclass
class FileDiff:
    """파일별 diff 정보."""

    path: Path
    change_type: ChangeType
    old_path: Path | None = None  # renamed인 경우
    additions: int = 0
    deletions: int = 0
    hunks: list[DiffHunk] = field(default_factory=list)


@dataclass
class DiffStats:
    """Diff 통계."""

    files_changed: int
    total_additions: int
    total_deletions: int


@dataclass
class ParsedDiff:
    """파싱된 diff 전체."""

    files: list[FileDiff]
    stats: DiffStats
    raw: str = ""


@dataclass
class PRInfo:
    """리뷰 대상 변경사항 (PR) 정보."""

    title: str
    description: str
    diff: str
    files: list[str] = field(default_factory=list)
    author: str = ""
    number: int | None = None


# ============================================================
# 대화 (Conversation) 모델
# ============================================================


@dataclass
class TextBlock:
    """텍스트 블록."""

    text: str


@dataclass
class ThinkingBlock:
    """확장 사고(extended thinking) 블록. 다음 턴에 그대로 되돌려 보내야 합니다."""

    thinking: str
    signature: str = ""
    redacted: bool = False


@dataclass
class ToolUseBlock:
    """모델이 요청한 도구 호출."""

    id: str
    name: str
    input: dict[str, Any] = field(default_factory=dict)


@dataclass
class ToolResultBlock:
    """도구 실행 결과 블록."""

    tool_use_id: str
    content: str
    is_error: bool = False


ContentBlock = TextBlock | ThinkingBlock | ToolUseBlock | ToolResultBlock


@dataclass
class Message:
    """대화 메시지 (user / assistant)."""

    role: str
    content: list[ContentBlock]

    @property
    def text(self) -> str:
        """텍스트 블록만 이어 붙인 문자열."""
        return "".join(b.text for b in self.content if isinstance(b, TextBlock))

    @property
    def tool_uses(self) -> list[ToolUseBlock]:
        """도구 호출 블록 목록."""
        return [b for b in self.content if isinstance(b, ToolUseBlock)]


@dataclass
class LLMResponse:
    """모델 호출 한 번의 결과."""

    content: list[ContentBlock]
    stop_reason: StopReason
    input_tokens: int = 0
    output_tokens: int = 0


# ============================================================
# 도구 실행 모델
# ============================================================


@dataclass
class ToolExecutionResult:
    """도구 실행 결과. 실패도 예외 대신 여기에 기록됩니다."""

    success: bool
    execution_time_ms: int
    result: str | None = None
    error: str | None = None


@dataclass
class ToolUsageStat:
    """도구별 사용 통계."""

    tool_name: str
    call_count: int = 0
    total_time_ms: int = 0


# ============================================================
# 리뷰 관련 모델
# ============================================================


@dataclass(frozen=True)
class Issue:
    """에이전트가 보고한 이슈."""

    confidence: int
    message: str
    line: int | None = None
    file: str | None = None
    suggestion: str | None = None

    @property
    def severity(self) -> Severity:
        """confidence에서 파생된 심각도."""
        return Severity.from_confidence(self.confidence)


@dataclass
class TokenUsage:
    """토큰 사용량 및 비용 (USD)."""

    input_tokens: int = 0
    output_tokens: int = 0
    cost: float = 0.0


@dataclass
class AgentReview:
    """에이전트별 리뷰 결과."""

    agent_name: str
    issues: list[Issue]
    summary: str = ""
    turn_count: int = 0
    tool_usage: list[ToolUsageStat] = field(default_factory=list)
    exploration_log: list[str] = field(default_factory=list)
    usage: TokenUsage = field(default_factory=TokenUsage)
    outcome: ReviewOutcome = ReviewOutcome.COMPLETED
    error: str | None = None

    @property
    def tool_call_count(self) -> int:
        """총 도구 호출 수."""
        return sum(stat.call_count for stat in self.tool_usage)


@dataclass
class ReviewTiming:
    """실행 시간 (밀리초)."""

    total_ms: int = 0
    per_agent_ms: dict[str, int] = field(default_factory=dict)


@dataclass
class AggregatedReport:
    """전체 리뷰 결과."""

    issues: list[Issue]
    agent_reviews: list[AgentReview]
    summary: str
    total_cost: float
    total_tool_calls: int = 0
    timing: ReviewTiming = field(default_factory=ReviewTiming)
    tool_usage_per_agent: dict[str, list[ToolUsageStat]] = field(default_factory=dict)
    tool_usage_aggregated: list[ToolUsageStat] = field(default_factory=list)

    @property
    def by_severity(self) -> dict[str, int]:
        """심각도별 이슈 수."""
        counts: dict[str, int] = {}
        for issue in self.issues:
            key = issue.severity.value
            counts[key] = counts.get(key, 0) + 1
        return counts
