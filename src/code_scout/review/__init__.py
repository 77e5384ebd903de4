"""Review module - Multi-Agent 도구 사용 코드 리뷰 기능."""

from code_scout.review.aggregator import aggregate
from code_scout.review.diff_parser import DiffParser
from code_scout.review.runner import (
    MultiAgentRunner,
    build_pr_info,
    run_review,
    run_review_sync,
)
from code_scout.review.sandbox import ToolExecutor

__all__ = [
    "DiffParser",
    "MultiAgentRunner",
    "ToolExecutor",
    "aggregate",
    "build_pr_info",
    "run_review",
    "run_review_sync",
]
