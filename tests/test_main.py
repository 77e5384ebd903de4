"""Test main CLI module."""

from pathlib import Path
from unittest.mock import patch

import yaml
from click.testing import CliRunner

from code_scout.main import cli
from code_scout.shared.models import AgentReview, AggregatedReport, Issue, TokenUsage


def make_report() -> AggregatedReport:
    issue = Issue(confidence=95, message="SQL injection risk", line=42)
    return AggregatedReport(
        issues=[issue],
        agent_reviews=[
            AgentReview(
                agent_name="Security (Agentic)",
                issues=[issue],
                summary="Injection found.",
                turn_count=2,
                usage=TokenUsage(input_tokens=1000, output_tokens=200, cost=0.006),
            )
        ],
        summary="# Multi-Agent Agentic Code Review",
        total_cost=0.006,
    )


def test_cli_help():
    """Test CLI help command."""
    runner = CliRunner()
    result = runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "Code-Scout" in result.output


def test_cli_version():
    """Test CLI version command."""
    runner = CliRunner()
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.output


def test_review_help():
    """Test review subcommand help."""
    runner = CliRunner()
    result = runner.invoke(cli, ["review", "--help"])
    assert result.exit_code == 0
    assert "Multi-Agent" in result.output
    assert "--max-turns" in result.output
    assert "--show-tools" in result.output


def test_agents_list():
    """Test agents command lists every agent."""
    runner = CliRunner()
    with runner.isolated_filesystem():
        result = runner.invoke(cli, ["agents"])
    assert result.exit_code == 0
    for key in ["security", "logic", "performance", "style"]:
        assert key in result.output


def test_config_show():
    """Test config show command."""
    runner = CliRunner()
    with runner.isolated_filesystem():
        result = runner.invoke(cli, ["config", "show"])
    assert result.exit_code == 0
    assert "LLM 설정" in result.output
    assert "리뷰 설정" in result.output


def test_config_init():
    """Test config init writes a loadable file."""
    runner = CliRunner()
    with runner.isolated_filesystem():
        result = runner.invoke(cli, ["config", "init"])
        assert result.exit_code == 0

        data = yaml.safe_load(Path(".code-scout.yaml").read_text(encoding="utf-8"))
        assert data["review"]["min_confidence"] == 70
        assert data["llm"]["models"]["opus"]["thinking_budget"] == 10000

        # 이미 있으면 덮어쓰지 않음
        second = runner.invoke(cli, ["config", "init"])
        assert "이미 존재합니다" in second.output

        # 생성된 파일을 그대로 다시 읽을 수 있음
        shown = runner.invoke(cli, ["config", "show"])
        assert shown.exit_code == 0
        assert ".code-scout.yaml" in shown.output


def test_invalid_config_file():
    """Test unknown config keys abort."""
    runner = CliRunner()
    with runner.isolated_filesystem():
        Path("bad.yaml").write_text("review:\n  unknown_key: 1\n")
        result = runner.invoke(cli, ["--config", "bad.yaml", "agents"])
    assert result.exit_code != 0
    assert "설정 파일 오류" in result.output


def test_review_json_output():
    """Test review passes options through and prints JSON."""
    runner = CliRunner()
    with runner.isolated_filesystem():
        with patch("code_scout.review.run_review_sync", return_value=make_report()) as mock_run:
            result = runner.invoke(
                cli,
                [
                    "--format",
                    "json",
                    "review",
                    "HEAD~1..HEAD",
                    "-a",
                    "security",
                    "-a",
                    "logic",
                    "--sequential",
                    "--min-confidence",
                    "80",
                    "--max-turns",
                    "3",
                ],
            )

    assert result.exit_code == 0, result.output
    assert '"SQL injection risk"' in result.output
    assert '"severity": "critical"' in result.output

    kwargs = mock_run.call_args.kwargs
    assert kwargs["commit_range"] == "HEAD~1..HEAD"
    assert kwargs["agents"] == ["security", "logic"]
    assert kwargs["parallel"] is False
    assert kwargs["min_confidence"] == 80
    assert kwargs["max_turns"] == 3
    assert kwargs["diff_text"] is None


def test_review_diff_file():
    """Test review reads a diff file instead of Git."""
    runner = CliRunner()
    with runner.isolated_filesystem():
        Path("change.diff").write_text("diff --git a/a.py b/a.py\n")
        with patch("code_scout.review.run_review_sync", return_value=make_report()) as mock_run:
            result = runner.invoke(
                cli, ["-f", "markdown", "review", "--diff-file", "change.diff", "--title", "Fix"]
            )

    assert result.exit_code == 0, result.output
    assert "SQL injection risk" in result.output
    kwargs = mock_run.call_args.kwargs
    assert kwargs["diff_text"] == "diff --git a/a.py b/a.py\n"
    assert kwargs["title"] == "Fix"
    assert kwargs["agents"] == ["security", "logic", "performance", "style"]


def test_review_error_aborts():
    """Test review failure prints the error and aborts."""
    runner = CliRunner()
    with runner.isolated_filesystem():
        with patch(
            "code_scout.review.run_review_sync",
            side_effect=ValueError("지원하지 않는 에이전트입니다: architect"),
        ):
            result = runner.invoke(cli, ["review", "-a", "architect"])

    assert result.exit_code != 0
    assert "architect" in result.output


def test_review_guidelines_file():
    """Test --guidelines file is prepended to the extra context."""
    runner = CliRunner()
    with runner.isolated_filesystem():
        Path("GUIDE.md").write_text("# Team rules\nNo raw SQL.\n")
        with patch("code_scout.review.run_review_sync", return_value=make_report()) as mock_run:
            result = runner.invoke(
                cli, ["review", "--guidelines", "GUIDE.md", "--context", "Hotfix release"]
            )

    assert result.exit_code == 0, result.output
    assert mock_run.call_args.kwargs["context"] == "# Team rules\nNo raw SQL.\n\nHotfix release"


def test_review_guidelines_missing_file():
    """Test a missing --guidelines file is rejected before review."""
    runner = CliRunner()
    with runner.isolated_filesystem():
        with patch("code_scout.review.run_review_sync") as mock_run:
            result = runner.invoke(cli, ["review", "--guidelines", "missing.md"])

    assert result.exit_code != 0
    assert "missing.md" in result.output
    mock_run.assert_not_called()


def test_review_guidelines_from_config():
    """Test review.guidelines in the config file is used without the option."""
    runner = CliRunner()
    with runner.isolated_filesystem():
        Path("GUIDE.md").write_text("Prefer small functions.\n")
        Path(".code-scout.yaml").write_text("review:\n  guidelines: GUIDE.md\n")
        with patch("code_scout.review.run_review_sync", return_value=make_report()) as mock_run:
            result = runner.invoke(cli, ["review"])

    assert result.exit_code == 0, result.output
    assert mock_run.call_args.kwargs["context"] == "Prefer small functions."


def test_review_repo_guidelines_from_config():
    """Test review.repo_guidelines wins over the default for a matching repo."""
    runner = CliRunner()
    with runner.isolated_filesystem():
        Path("service").mkdir()
        Path("DEFAULT.md").write_text("Default rules.\n")
        Path("SERVICE.md").write_text("Service rules.\n")
        Path(".code-scout.yaml").write_text(
            "review:\n"
            "  guidelines: DEFAULT.md\n"
            "  repo_guidelines:\n"
            "    service: SERVICE.md\n"
        )
        with patch("code_scout.review.run_review_sync", return_value=make_report()) as mock_run:
            result = runner.invoke(cli, ["review", "--repo", "service"])

    assert result.exit_code == 0, result.output
    assert mock_run.call_args.kwargs["context"] == "Service rules."


def test_review_guidelines_from_config_missing():
    """Test a configured guidelines file that does not exist aborts."""
    runner = CliRunner()
    with runner.isolated_filesystem():
        Path(".code-scout.yaml").write_text("review:\n  guidelines: GONE.md\n")
        with patch("code_scout.review.run_review_sync") as mock_run:
            result = runner.invoke(cli, ["review"])

    assert result.exit_code != 0
    assert "가이드라인 파일을 찾을 수 없습니다" in result.output
    mock_run.assert_not_called()
