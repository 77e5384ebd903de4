"""에이전트 리뷰 결과 종합기.

여러 에이전트의 이슈를 하나로 모아 필터링, 중복 제거, 정렬한 뒤
비용과 도구 사용량, 요약을 포함한 AggregatedReport를 만듭니다.
"""

import re

from code_scout.shared.models import (
    AgentReview,
    AggregatedReport,
    Issue,
    ReviewOutcome,
    ReviewTiming,
    Severity,
    ToolUsageStat,
)

NORMALIZED_MESSAGE_LENGTH = 100
EXPLORATION_PREVIEW = 3


def normalize_message(message: str) -> str:
    """중복 판별용 메시지 정규화.

    소문자 변환, 영숫자/공백 이외 문자 제거, 공백 축약 후 앞 100자만 사용합니다.
    """
    text = re.sub(r"[^a-z0-9\s]", "", message.lower())
    text = re.sub(r"\s+", " ", text).strip()
    return text[:NORMALIZED_MESSAGE_LENGTH]


def _dedup_key(issue: Issue) -> str:
    location = issue.line if issue.line else "global"
    return f"{location}:{normalize_message(issue.message)}"


def deduplicate_issues(issues: list[Issue]) -> list[Issue]:
    """같은 위치, 같은 메시지의 이슈 중 먼저 나온 것만 남깁니다."""
    seen: set[str] = set()
    unique = []
    for issue in issues:
        key = _dedup_key(issue)
        if key not in seen:
            seen.add(key)
            unique.append(issue)
    return unique


def aggregate_tool_usage(usages: list[ToolUsageStat]) -> list[ToolUsageStat]:
    """도구별 사용 통계를 합산 (호출 수 내림차순)."""
    merged: dict[str, ToolUsageStat] = {}
    for usage in usages:
        stat = merged.setdefault(usage.tool_name, ToolUsageStat(tool_name=usage.tool_name))
        stat.call_count += usage.call_count
        stat.total_time_ms += usage.total_time_ms

    return sorted(merged.values(), key=lambda s: s.call_count, reverse=True)


def aggregate(
    reviews: list[AgentReview],
    min_confidence: int = 70,
    timing: ReviewTiming | None = None,
) -> AggregatedReport:
    """에이전트 리뷰들을 하나의 리포트로 종합.

    Args:
        reviews: 에이전트 리뷰 목록. 순서가 중복 제거 우선순위를 결정합니다.
        min_confidence: 이 값 미만의 이슈는 제외
        timing: 실행 시간 정보

    Returns:
        AggregatedReport 객체
    """
    timing = timing or ReviewTiming()

    all_issues = [issue for review in reviews for issue in review.issues]
    filtered = [issue for issue in all_issues if issue.confidence >= min_confidence]
    issues = sorted(
        deduplicate_issues(filtered),
        key=lambda issue: issue.confidence,
        reverse=True,
    )

    total_cost = sum(review.usage.cost for review in reviews)
    total_tool_calls = sum(review.tool_call_count for review in reviews)

    tool_usage_per_agent = {review.agent_name: review.tool_usage for review in reviews}
    tool_usage_aggregated = aggregate_tool_usage(
        [stat for review in reviews for stat in review.tool_usage]
    )

    return AggregatedReport(
        issues=issues,
        agent_reviews=reviews,
        summary=build_summary(reviews, issues, total_tool_calls, timing),
        total_cost=total_cost,
        total_tool_calls=total_tool_calls,
        timing=timing,
        tool_usage_per_agent=tool_usage_per_agent,
        tool_usage_aggregated=tool_usage_aggregated,
    )


def build_summary(
    reviews: list[AgentReview],
    issues: list[Issue],
    total_tool_calls: int,
    timing: ReviewTiming | None = None,
) -> str:
    """마크다운 요약 생성."""
    counts = {severity: 0 for severity in Severity}
    for issue in issues:
        counts[issue.severity] += 1
    breakdown = ", ".join(f"{counts[s]} {s.value}" for s in Severity)

    lines = [
        "# Multi-Agent Agentic Code Review",
        "",
        f"**Agents**: {', '.join(r.agent_name for r in reviews)}",
        f"**Total Issues**: {len(issues)} ({breakdown})",
        f"**Total Tool Calls**: {total_tool_calls} across {len(reviews)} agents",
    ]
    if timing and timing.total_ms:
        lines.append(f"**Duration**: {timing.total_ms / 1000:.1f}s")
    lines.append("")

    for review in reviews:
        agent_messages = {issue.message for issue in review.issues}
        agent_issues = [issue for issue in issues if issue.message in agent_messages]

        lines.extend([f"## {review.agent_name}", ""])

        if review.outcome is ReviewOutcome.FAILED:
            lines.extend([f"**Failed**: {review.error}", ""])

        if review.exploration_log:
            exploration = ", ".join(review.exploration_log[:EXPLORATION_PREVIEW])
            remaining = len(review.exploration_log) - EXPLORATION_PREVIEW
            if remaining > 0:
                exploration += f" (and {remaining} more)"
            lines.extend([f"**Exploration**: {exploration}", ""])

        if not agent_issues:
            lines.extend(["No issues found.", ""])
            continue

        lines.extend([f"{len(agent_issues)} issue(s)", ""])
        for issue in agent_issues:
            location = f" Line {issue.line}:" if issue.line else ""
            lines.append(f"[CONFIDENCE: {issue.confidence}]{location} {issue.message}")
        lines.append("")

    return "\n".join(lines)
