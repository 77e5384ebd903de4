"""데이터 모델 테스트."""

import pytest

from code_scout.shared.models import (
    AgentReview,
    AggregatedReport,
    Issue,
    Message,
    Severity,
    TextBlock,
    ToolResultBlock,
    ToolUsageStat,
    ToolUseBlock,
)


class TestSeverity:
    """confidence → 심각도 변환 테스트."""

    @pytest.mark.parametrize(
        "confidence,expected",
        [
            (100, Severity.CRITICAL),
            (90, Severity.CRITICAL),
            (89, Severity.HIGH),
            (80, Severity.HIGH),
            (79, Severity.MEDIUM),
            (70, Severity.MEDIUM),
            (69, Severity.LOW),
            (0, Severity.LOW),
        ],
    )
    def test_from_confidence(self, confidence: int, expected: Severity) -> None:
        assert Severity.from_confidence(confidence) == expected
        assert Issue(confidence=confidence, message="x").severity == expected


class TestIssue:
    """Issue 테스트."""

    def test_defaults(self) -> None:
        issue = Issue(confidence=80, message="Unchecked input")

        assert issue.line is None
        assert issue.file is None
        assert issue.suggestion is None

    def test_is_hashable(self) -> None:
        issue = Issue(confidence=80, message="Unchecked input", line=3)

        assert issue in {Issue(confidence=80, message="Unchecked input", line=3)}


class TestMessage:
    """Message 테스트."""

    def test_text_joins_text_blocks(self) -> None:
        message = Message(
            role="assistant",
            content=[
                TextBlock(text="First. "),
                ToolUseBlock(id="toolu_1", name="read_file", input={"path": "a.py"}),
                TextBlock(text="Second."),
            ],
        )

        assert message.text == "First. Second."
        assert [b.id for b in message.tool_uses] == ["toolu_1"]

    def test_tool_results_have_no_text(self) -> None:
        message = Message(role="user", content=[ToolResultBlock(tool_use_id="t", content="x")])

        assert message.text == ""
        assert message.tool_uses == []


class TestReviewModels:
    """AgentReview / AggregatedReport 테스트."""

    def test_tool_call_count(self) -> None:
        review = AgentReview(
            agent_name="Logic (Agentic)",
            issues=[],
            tool_usage=[
                ToolUsageStat("read_file", call_count=3),
                ToolUsageStat("git_history", call_count=1),
            ],
        )

        assert review.tool_call_count == 4

    def test_by_severity(self) -> None:
        report = AggregatedReport(
            issues=[
                Issue(confidence=95, message="a"),
                Issue(confidence=91, message="b"),
                Issue(confidence=75, message="c"),
            ],
            agent_reviews=[],
            summary="",
            total_cost=0.0,
        )

        assert report.by_severity == {"critical": 2, "medium": 1}
