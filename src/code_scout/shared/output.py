"""출력 포매터 모듈."""

import json
from abc import ABC, abstractmethod
from dataclasses import fields, is_dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from code_scout.shared.models import (
    AgentReview,
    AggregatedReport,
    Issue,
    OutputFormat,
    ReviewOutcome,
    Severity,
    ToolUsageStat,
)

SEVERITY_STYLES = {
    Severity.CRITICAL: "bold red",
    Severity.HIGH: "red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "blue",
}


def _location(issue: Issue) -> str:
    if issue.file and issue.line:
        return f"{issue.file}:{issue.line}"
    if issue.file:
        return issue.file
    if issue.line:
        return f"line {issue.line}"
    return "global"


class BaseFormatter(ABC):
    """출력 포매터 추상 클래스."""

    @abstractmethod
    def format(self, data: Any) -> str:
        """데이터를 포맷된 문자열로 변환.

        Args:
            data: 포맷할 데이터 객체

        Returns:
            포맷된 문자열
        """
        ...

    def _get_formatter_method(self, data: Any) -> str:
        """데이터 타입에 맞는 포맷 메서드 호출."""
        formatters = {
            AggregatedReport: self._format_report,
            AgentReview: self._format_agent_review,
        }

        formatter = formatters.get(type(data))
        if formatter:
            return formatter(data)
        return self._format_generic(data)

    @abstractmethod
    def _format_report(self, data: AggregatedReport) -> str:
        """AggregatedReport 포맷."""
        ...

    @abstractmethod
    def _format_agent_review(self, data: AgentReview) -> str:
        """AgentReview 포맷."""
        ...

    @abstractmethod
    def _format_generic(self, data: Any) -> str:
        """일반 데이터 포맷."""
        ...


class ConsoleFormatter(BaseFormatter):
    """Rich를 사용한 터미널 출력 포매터."""

    def __init__(self, show_tools: bool = False) -> None:
        self.console = Console(record=True)
        self.show_tools = show_tools

    def format(self, data: Any) -> str:
        """데이터를 Rich 포맷으로 콘솔에 출력하고 문자열 반환."""
        return self._get_formatter_method(data)

    def _format_report(self, data: AggregatedReport) -> str:
        """AggregatedReport를 Rich 포맷으로 출력."""
        self.console.print(
            Panel("[bold]Multi-Agent Agentic Code Review[/bold]", border_style="blue")
        )

        # 실행 통계
        stats_table = Table(title="Statistics", show_header=True)
        stats_table.add_column("Metric", style="cyan")
        stats_table.add_column("Value", style="green")
        stats_table.add_row("Agents", str(len(data.agent_reviews)))
        stats_table.add_row("Issues", str(len(data.issues)))
        stats_table.add_row("Tool Calls", str(data.total_tool_calls))
        stats_table.add_row("Cost", f"${data.total_cost:.4f}")
        stats_table.add_row("Duration", f"{data.timing.total_ms / 1000:.1f}s")
        self.console.print(stats_table)

        # 이슈 테이블
        if data.issues:
            issues_table = Table(title="Issues", show_header=True)
            issues_table.add_column("Severity")
            issues_table.add_column("Conf.", style="dim")
            issues_table.add_column("Location", style="cyan")
            issues_table.add_column("Message")

            for issue in data.issues:
                issues_table.add_row(
                    Text(issue.severity.value.upper(), style=SEVERITY_STYLES[issue.severity]),
                    str(issue.confidence),
                    _location(issue),
                    issue.message,
                )
            self.console.print(issues_table)
        elif data.agent_reviews:
            self.console.print("\n[green]No issues found.[/green]")

        # 에이전트별 리뷰
        for agent_review in data.agent_reviews:
            self._format_agent_review(agent_review)

        if self.show_tools and data.tool_usage_aggregated:
            self._print_tool_usage(data.tool_usage_aggregated)

        if not data.agent_reviews and data.summary:
            self.console.print(Panel(data.summary, border_style="green"))

        return self.console.export_text()

    def _format_agent_review(self, data: AgentReview) -> str:
        """AgentReview를 Rich 포맷으로 출력."""
        self.console.print(
            f"\n[bold magenta]{data.agent_name}[/bold magenta] "
            f"[dim]({len(data.issues)} issues, {data.turn_count} turns, "
            f"{data.tool_call_count} tool calls, ${data.usage.cost:.4f})[/dim]"
        )

        if data.outcome is ReviewOutcome.FAILED:
            self.console.print(f"  [red]Failed:[/red] {data.error}")
            return self.console.export_text()

        if data.outcome is not ReviewOutcome.COMPLETED:
            self.console.print(f"  [yellow]Incomplete ({data.outcome.value})[/yellow]")

        if data.summary:
            self.console.print(f"  [dim]Summary: {data.summary}[/dim]")

        if self.show_tools:
            for entry in data.exploration_log:
                self.console.print(f"  [dim]{entry}[/dim]")

        return self.console.export_text()

    def _print_tool_usage(self, usage: list[ToolUsageStat]) -> None:
        table = Table(title="Tool Usage", show_header=True)
        table.add_column("Tool", style="cyan")
        table.add_column("Calls", style="green")
        table.add_column("Time (ms)", style="dim")
        for stat in usage:
            table.add_row(stat.tool_name, str(stat.call_count), str(stat.total_time_ms))
        self.console.print(table)

    def _format_generic(self, data: Any) -> str:
        """일반 데이터를 Rich 포맷으로 출력."""
        if hasattr(data, "__dict__"):
            self.console.print(Panel(str(data.__dict__), title=type(data).__name__))
        else:
            self.console.print(str(data))
        return self.console.export_text()


class JSONFormatter(BaseFormatter):
    """JSON 출력 포매터 (파이프라인 친화적)."""

    def __init__(self, indent: int = 2) -> None:
        self.indent = indent

    def format(self, data: Any) -> str:
        """데이터를 JSON 문자열로 변환."""
        return self._get_formatter_method(data)

    def _to_serializable(self, obj: Any) -> Any:
        """객체를 JSON 직렬화 가능한 형태로 변환."""
        if is_dataclass(obj) and not isinstance(obj, type):
            result = {f.name: self._to_serializable(getattr(obj, f.name)) for f in fields(obj)}
            # 파생 속성도 포함
            if isinstance(obj, Issue):
                result["severity"] = obj.severity.value
            if isinstance(obj, AggregatedReport):
                result["by_severity"] = obj.by_severity
            return result
        if isinstance(obj, Enum):
            return obj.value
        if isinstance(obj, Path):
            return str(obj)
        if isinstance(obj, list):
            return [self._to_serializable(item) for item in obj]
        if isinstance(obj, dict):
            return {k: self._to_serializable(v) for k, v in obj.items()}
        return obj

    def _to_json(self, data: Any) -> str:
        """객체를 JSON 문자열로 변환하는 헬퍼."""
        return json.dumps(
            self._to_serializable(data),
            indent=self.indent,
            ensure_ascii=False,
        )

    def _format_report(self, data: AggregatedReport) -> str:
        return self._to_json(data)

    def _format_agent_review(self, data: AgentReview) -> str:
        return self._to_json(data)

    def _format_generic(self, data: Any) -> str:
        return self._to_json(data)


class MarkdownFormatter(BaseFormatter):
    """Markdown 출력 포매터.

    집계 요약(AggregatedReport.summary) 뒤에 이슈 표와 비용 정보를 덧붙입니다.
    """

    def format(self, data: Any) -> str:
        """데이터를 Markdown 문자열로 변환."""
        return self._get_formatter_method(data)

    def _format_report(self, data: AggregatedReport) -> str:
        """AggregatedReport를 Markdown으로 변환."""
        lines = [data.summary.rstrip(), ""]

        if data.issues:
            lines.extend(
                [
                    "## All Issues",
                    "",
                    "| Severity | Confidence | Location | Message |",
                    "|----------|------------|----------|---------|",
                ]
            )
            for issue in data.issues:
                message = issue.message.replace("\n", " ").replace("|", "\\|")
                lines.append(
                    f"| {issue.severity.value} | {issue.confidence} | "
                    f"`{_location(issue)}` | {message} |"
                )
            lines.append("")

        if data.tool_usage_aggregated:
            lines.extend(["## Tool Usage", ""])
            for stat in data.tool_usage_aggregated:
                lines.append(
                    f"- **{stat.tool_name}**: {stat.call_count} calls ({stat.total_time_ms}ms)"
                )
            lines.append("")

        if data.agent_reviews:
            lines.append(f"**Total Cost**: ${data.total_cost:.4f}")
            lines.append("")

        return "\n".join(lines)

    def _format_agent_review(self, data: AgentReview) -> str:
        """AgentReview를 Markdown으로 변환."""
        lines = [
            f"### {data.agent_name}",
            "",
            f"*{len(data.issues)} issues, {data.turn_count} turns, {data.outcome.value}*",
            "",
        ]

        for issue in data.issues:
            lines.append(f"- **[{issue.severity.value.upper()}]** `{_location(issue)}`")
            lines.append(f"  - {issue.message}")
            if issue.suggestion:
                lines.append(f"  - *Suggestion*: {issue.suggestion}")

        if data.summary:
            lines.extend(["", f"**Summary**: {data.summary}", ""])

        return "\n".join(lines)

    def _format_generic(self, data: Any) -> str:
        """일반 데이터를 Markdown으로 변환."""
        if hasattr(data, "__dict__"):
            lines = [f"# {type(data).__name__}", ""]
            for key, value in data.__dict__.items():
                lines.append(f"- **{key}**: {value}")
            return "\n".join(lines)
        return f"```\n{data}\n```"


def get_formatter(format_type: str = "console", show_tools: bool = False) -> BaseFormatter:
    """포매터 팩토리 함수.

    Args:
        format_type: 출력 형식 ("console", "json", "markdown")
        show_tools: 콘솔 출력에 탐색 로그와 도구 사용량 포함 여부

    Returns:
        해당 형식의 포매터 인스턴스

    Raises:
        ValueError: 지원하지 않는 형식인 경우
    """
    format_type = format_type.lower()
    if format_type == "console":
        return ConsoleFormatter(show_tools=show_tools)
    if format_type == "json":
        return JSONFormatter()
    if format_type == "markdown":
        return MarkdownFormatter()

    supported = ", ".join(f.value for f in OutputFormat)
    raise ValueError(f"Unsupported format type: {format_type}. Supported: {supported}")
