"""Pytest configuration and shared fixtures."""

import asyncio
import subprocess
from pathlib import Path

import pytest

from code_scout.shared.llm import BaseLLM
from code_scout.shared.models import (
    LLMResponse,
    PRInfo,
    StopReason,
    TextBlock,
    ToolUseBlock,
)


class ScriptedLLM(BaseLLM):
    """미리 정한 응답을 순서대로 돌려주는 테스트용 LLM.

    by_model을 지정하면 모델 ID별로 별도의 응답 큐를 사용합니다.
    큐가 비면 repeat 응답을 반복하고, 그것도 없으면 AssertionError를 던집니다.
    큐 항목이 예외이면 그 예외를 발생시킵니다.
    """

    def __init__(
        self,
        responses: list | None = None,
        by_model: dict[str, list] | None = None,
        repeat: LLMResponse | None = None,
        delays: dict[str, float] | None = None,
    ) -> None:
        self.responses = list(responses or [])
        self.by_model = {model: list(items) for model, items in (by_model or {}).items()}
        self.repeat = repeat
        self.delays = delays or {}
        self.calls: list[dict] = []

    async def create_message(self, messages, tools, model, max_tokens, thinking_budget=None):
        self.calls.append(
            {
                "messages": list(messages),
                "tools": tools,
                "model": model,
                "max_tokens": max_tokens,
                "thinking_budget": thinking_budget,
            }
        )

        if model in self.delays:
            await asyncio.sleep(self.delays[model])

        queue = self.by_model.get(model, self.responses)
        if queue:
            item = queue.pop(0)
        elif self.repeat is not None:
            item = self.repeat
        else:
            raise AssertionError(f"No scripted response left for {model}")

        if isinstance(item, Exception):
            raise item
        return item

    def get_provider_name(self) -> str:
        return "scripted"


def make_text_response(
    text: str,
    stop_reason: StopReason = StopReason.END_TURN,
    input_tokens: int = 1000,
    output_tokens: int = 200,
) -> LLMResponse:
    return LLMResponse(
        content=[TextBlock(text)],
        stop_reason=stop_reason,
        input_tokens=input_tokens,
        output_tokens=output_tokens,
    )


def make_tool_response(
    *calls: tuple[str, dict],
    text: str = "",
    input_tokens: int = 1000,
    output_tokens: int = 100,
) -> LLMResponse:
    content = [TextBlock(text)] if text else []
    content.extend(
        ToolUseBlock(id=f"toolu_{i}", name=name, input=tool_input)
        for i, (name, tool_input) in enumerate(calls, start=1)
    )
    return LLMResponse(
        content=content,
        stop_reason=StopReason.TOOL_USE,
        input_tokens=input_tokens,
        output_tokens=output_tokens,
    )


@pytest.fixture
def scripted_llm():
    """ScriptedLLM 팩토리."""
    return ScriptedLLM


@pytest.fixture
def text_response():
    """텍스트(end_turn) 응답 팩토리."""
    return make_text_response


@pytest.fixture
def tool_response():
    """tool_use 응답 팩토리."""
    return make_tool_response


@pytest.fixture
def sample_pr() -> PRInfo:
    """샘플 PRInfo."""
    return PRInfo(
        title="Add user lookup",
        description="Adds a lookup endpoint",
        diff=(
            "diff --git a/app.py b/app.py\n"
            "--- a/app.py\n"
            "+++ b/app.py\n"
            "@@ -1,2 +1,3 @@\n"
            " import db\n"
            "+query = f\"SELECT * FROM users WHERE id = {user_id}\"\n"
        ),
        files=["app.py"],
    )


def _git(repo_path: Path, *args: str) -> None:
    subprocess.run(["git", *args], cwd=repo_path, check=True, capture_output=True)


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    """테스트용 Git 저장소를 생성합니다."""
    repo_path = tmp_path / "test_repo"
    repo_path.mkdir()

    _git(repo_path, "init")
    _git(repo_path, "config", "user.email", "test@example.com")
    _git(repo_path, "config", "user.name", "Test User")
    # GPG 서명 비활성화 (테스트 환경용)
    _git(repo_path, "config", "commit.gpgsign", "false")

    (repo_path / "main.py").write_text("from utils import helper\n\nhelper()\n")
    (repo_path / "utils.py").write_text("def helper():\n    return 1\n")
    (repo_path / "README.md").write_text("# Test\n")

    _git(repo_path, "add", ".")
    _git(repo_path, "commit", "-m", "Initial commit")

    (repo_path / "utils.py").write_text("def helper():\n    return 2\n")
    _git(repo_path, "commit", "-am", "Change helper result")

    return repo_path
