"""도구를 사용하는 리뷰 에이전트.

에이전트 하나는 모델과의 대화 하나를 소유하고, 턴마다 모델이 요청한 도구를
샌드박스에서 실행해 결과를 돌려준 뒤 마지막 응답에서 이슈를 추출합니다.
"""

import json
import logging
import re
from pathlib import Path

from code_scout.prompts import load_prompt
from code_scout.review.sandbox import ToolExecutor
from code_scout.review.tools import REVIEW_TOOLS
from code_scout.shared.config import ModelConfig, ToolsConfig
from code_scout.shared.llm import BaseLLM
from code_scout.shared.models import (
    AgentReview,
    Issue,
    Message,
    PRInfo,
    ReviewOutcome,
    StopReason,
    TextBlock,
    TokenUsage,
    ToolResultBlock,
    ToolUsageStat,
    ToolUseBlock,
)

from .configs import AgentConfig

logger = logging.getLogger(__name__)

DEFAULT_SUMMARY = "No summary provided"

# [CONFIDENCE: 85] Line 42: ... / [CONFIDENCE: 85] File: a.py ... / [CONFIDENCE: 85] ...
ISSUE_PATTERN = re.compile(
    r"\[CONFIDENCE:\s*(\d+)\]"
    r"(?:\s*(?:Line\s+(\d+):?|File:\s*(\S+)))?"
    r"\s*(.+?)(?=\[CONFIDENCE:|\n##\s|\Z)",
    re.DOTALL,
)
SUMMARY_PATTERN = re.compile(r"## Summary\s*\n(.+?)(?=\n##|\Z)", re.DOTALL)
SUGGESTION_PREFIX = "suggestion:"
DANGLING_MARKER = re.compile(r"\n[ \t]*[-*][ \t]*\Z")


def parse_issues(review_text: str) -> list[Issue]:
    """리뷰 텍스트에서 confidence 태그가 붙은 이슈를 추출.

    Args:
        review_text: 마지막 assistant 메시지의 텍스트

    Returns:
        Issue 리스트 (등장 순서)
    """
    issues = []
    for match in ISSUE_PATTERN.finditer(review_text):
        confidence = min(int(match.group(1)), 100)
        line = int(match.group(2)) if match.group(2) else None
        file = match.group(3) or None
        message, suggestion = _split_suggestion(match.group(4))

        issues.append(
            Issue(
                confidence=confidence,
                message=message,
                line=line,
                file=file,
                suggestion=suggestion,
            )
        )
    return issues


def _split_suggestion(segment: str) -> tuple[str, str | None]:
    """세그먼트에서 'Suggestion:' 줄을 분리."""
    # 다음 이슈의 목록 기호("- ")가 앞 세그먼트의 마지막 줄로 남음
    segment = DANGLING_MARKER.sub("", segment.strip()).strip()
    lines = segment.split("\n")
    for i, line in enumerate(lines):
        stripped = line.strip().lstrip("-* ")
        if stripped.lower().startswith(SUGGESTION_PREFIX):
            suggestion = stripped[len(SUGGESTION_PREFIX):].strip() or None
            message = "\n".join(lines[:i] + lines[i + 1:]).strip()
            return message, suggestion
    return segment, None


def extract_summary(review_text: str) -> str:
    """'## Summary' 섹션의 첫 단락을 추출. 없으면 기본 문구."""
    match = SUMMARY_PATTERN.search(review_text)
    if match and match.group(1).strip():
        return match.group(1).strip()
    return DEFAULT_SUMMARY


def calculate_cost(model: ModelConfig, input_tokens: int, output_tokens: int) -> float:
    """토큰 사용량으로 비용(USD) 계산."""
    input_cost = (input_tokens / 1_000_000) * model.pricing.input
    output_cost = (output_tokens / 1_000_000) * model.pricing.output
    return input_cost + output_cost


def format_tool_input(tool_input: dict) -> str:
    """탐색 로그용 도구 인자 문자열 (예: path:src/a.py)."""
    text = json.dumps(tool_input, separators=(",", ":"), ensure_ascii=False)
    return re.sub(r"^\{|\}$", "", text).replace('"', "")


class ReviewAgent:
    """리뷰 에이전트.

    하나의 관점(보안, 로직 등)에 대해 모델과 여러 턴에 걸쳐 대화하며,
    필요할 때 읽기 전용 도구로 코드베이스를 탐색합니다.
    대화와 도구 사용 통계는 review() 호출마다 새로 만들어지고 공유되지 않습니다.
    """

    def __init__(
        self,
        config: AgentConfig,
        llm: BaseLLM,
        model: ModelConfig,
        tools_config: ToolsConfig | None = None,
        min_confidence: int = 70,
    ) -> None:
        """에이전트 초기화.

        Args:
            config: 에이전트 설정 (이름, 최대 턴 수, 프롬프트 등)
            llm: 사용할 LLM 인스턴스
            model: 이 에이전트가 사용할 모델 설정 (ID, 토큰 한도, 가격)
            tools_config: 샌드박스 도구 제한
            min_confidence: 프롬프트에 안내할 최소 confidence
        """
        self.config = config
        self.llm = llm
        self.model = model
        self.tools_config = tools_config or ToolsConfig()
        self.min_confidence = min_confidence

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def max_turns(self) -> int:
        return self.config.max_turns

    def build_prompt(self, pr_info: PRInfo, context: str = "") -> str:
        """초기 user 메시지 생성."""
        title_line = f"**Title**: {pr_info.title}\n" if pr_info.title else ""
        description_line = (
            f"**Description**: {pr_info.description}\n" if pr_info.description else ""
        )

        pr_section = load_prompt(
            "review/_pr",
            min_confidence=self.min_confidence,
            title_line=title_line,
            description_line=description_line,
            files_changed=len(pr_info.files),
            context=context or "No additional context provided",
            diff=pr_info.diff,
        )
        return load_prompt(
            self.config.prompt_name,
            tool_guidance=load_prompt("review/_tools"),
            pr_section=pr_section,
        )

    async def review(
        self,
        pr_info: PRInfo,
        context: str = "",
        repo_path: str | Path = ".",
    ) -> AgentReview:
        """멀티 턴 도구 사용 리뷰를 실행.

        Args:
            pr_info: 리뷰할 변경사항
            context: 추가 컨텍스트 (가이드라인 등)
            repo_path: 도구가 탐색할 저장소 루트

        Returns:
            AgentReview 객체

        Raises:
            ModelTransportError: 모델 호출이 실패한 경우 (부분 결과 없음)
        """
        executor = ToolExecutor(repo_path, self.tools_config)
        messages = [Message(role="user", content=[TextBlock(self.build_prompt(pr_info, context))])]

        turn_count = 0
        tool_usage: dict[str, ToolUsageStat] = {}
        exploration_log: list[str] = []
        input_tokens = 0
        output_tokens = 0
        outcome: ReviewOutcome | None = None

        logger.info(f"[{self.name}] 리뷰 시작 (최대 {self.max_turns}턴)")

        while turn_count < self.max_turns:
            turn_count += 1
            logger.debug(f"[{self.name}] Turn {turn_count}/{self.max_turns}")

            response = await self.llm.create_message(
                messages,
                REVIEW_TOOLS,
                model=self.model.id,
                max_tokens=self.model.max_tokens,
                thinking_budget=self.model.thinking_budget,
            )
            input_tokens += response.input_tokens
            output_tokens += response.output_tokens

            messages.append(Message(role="assistant", content=response.content))

            if response.stop_reason is StopReason.END_TURN:
                outcome = ReviewOutcome.COMPLETED
                break

            if response.stop_reason is StopReason.MAX_TOKENS:
                logger.warning(f"[{self.name}] 최대 토큰 한도에 도달했습니다. 리뷰가 불완전할 수 있습니다.")
                outcome = ReviewOutcome.TRUNCATED_BY_TOKEN_LIMIT
                break

            tool_uses = [b for b in response.content if isinstance(b, ToolUseBlock)]
            if not tool_uses:
                outcome = ReviewOutcome.COMPLETED
                break

            results = []
            for block in tool_uses:
                result = await self._run_tool(
                    executor, block, turn_count, tool_usage, exploration_log
                )
                results.append(result)

            messages.append(Message(role="user", content=results))

        if outcome is None:
            logger.warning(
                f"[{self.name}] 최대 턴 수({self.max_turns})에 도달했습니다. "
                "리뷰가 불완전할 수 있습니다."
            )
            outcome = ReviewOutcome.TRUNCATED_BY_TURN_LIMIT

        review_text = self._last_assistant_text(messages)
        issues = parse_issues(review_text)

        logger.info(
            f"[{self.name}] 리뷰 완료: {turn_count}턴, {len(issues)}개 이슈 ({outcome.value})"
        )

        return AgentReview(
            agent_name=self.name,
            issues=issues,
            summary=extract_summary(review_text),
            turn_count=turn_count,
            tool_usage=list(tool_usage.values()),
            exploration_log=exploration_log,
            usage=TokenUsage(
                input_tokens=input_tokens,
                output_tokens=output_tokens,
                cost=calculate_cost(self.model, input_tokens, output_tokens),
            ),
            outcome=outcome,
        )

    async def _run_tool(
        self,
        executor: ToolExecutor,
        block: ToolUseBlock,
        turn: int,
        tool_usage: dict[str, ToolUsageStat],
        exploration_log: list[str],
    ) -> ToolResultBlock:
        """도구 하나를 실행하고 tool_result 블록을 만듭니다."""
        exploration_log.append(f"Turn {turn}: {block.name}({format_tool_input(block.input)})")

        result = await executor.execute(block.name, block.input)

        stat = tool_usage.setdefault(block.name, ToolUsageStat(tool_name=block.name))
        stat.call_count += 1
        stat.total_time_ms += result.execution_time_ms

        if result.success:
            logger.debug(f"[{self.name}] {block.name}: {result.execution_time_ms}ms")
            return ToolResultBlock(
                tool_use_id=block.id,
                content=result.result or "Success",
            )

        logger.debug(f"[{self.name}] {block.name} 실패: {result.error}")
        return ToolResultBlock(
            tool_use_id=block.id,
            content=f"Error: {result.error}",
            is_error=True,
        )

    @staticmethod
    def _last_assistant_text(messages: list[Message]) -> str:
        for message in reversed(messages):
            if message.role == "assistant":
                return message.text
        return ""
