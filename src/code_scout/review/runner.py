"""Review Runner - Multi-Agent 리뷰 실행기."""

import asyncio
import logging
import time
from pathlib import Path

from code_scout.shared.config import AppConfig, ModelConfig, ToolsConfig
from code_scout.shared.git import GitClient
from code_scout.shared.llm import BaseLLM, get_llm_from_config
from code_scout.shared.models import (
    AgentReview,
    AggregatedReport,
    PRInfo,
    ReviewOutcome,
    ReviewTiming,
)

from .agents import ReviewAgent, get_agent, get_available_agents
from .aggregator import aggregate
from .diff_parser import DiffParser

logger = logging.getLogger(__name__)

EMPTY_DIFF_SUMMARY = "리뷰할 변경사항이 없습니다."


class MultiAgentRunner:
    """Multi-Agent 코드 리뷰 실행기.

    여러 에이전트를 병렬 또는 순차로 실행하고 결과를 종합합니다.
    각 에이전트는 자신의 대화와 샌드박스를 소유하며, 한 에이전트의 실패가
    다른 에이전트를 중단시키지 않습니다.
    """

    def __init__(
        self,
        agents: list[str] | None = None,
        llm: BaseLLM | None = None,
        repo_path: str | Path = ".",
        parallel: bool = True,
        min_confidence: int = 70,
        models: dict[str, ModelConfig] | None = None,
        tools_config: ToolsConfig | None = None,
        max_turns: int | None = None,
        show_tools: bool = False,
    ) -> None:
        """MultiAgentRunner 초기화.

        Args:
            agents: 사용할 에이전트 이름 목록. None이면 전체 에이전트 사용.
            llm: 사용할 LLM 인스턴스. None이면 기본 설정으로 생성.
            repo_path: 도구가 탐색할 저장소 루트
            parallel: True면 에이전트를 병렬로 실행.
            min_confidence: 리포트에 포함할 최소 confidence
            models: 모델 카탈로그. None이면 기본 카탈로그 사용.
            tools_config: 샌드박스 도구 제한
            max_turns: 모든 에이전트의 최대 턴 수 덮어쓰기
            show_tools: True면 에이전트 종료 후 탐색 로그를 출력

        Raises:
            ValueError: 에이전트 목록이 비어 있는 경우
        """
        names = agents if agents is not None else get_available_agents()
        # 같은 에이전트를 두 번 실행하지 않음
        self.agent_names = list(dict.fromkeys(name.lower() for name in names))
        if not self.agent_names:
            raise ValueError("실행할 에이전트가 없습니다.")

        self._llm = llm
        self.repo_path = Path(repo_path)
        self.parallel = parallel
        self.min_confidence = min_confidence
        self.models = models
        self.tools_config = tools_config
        self.max_turns = max_turns
        self.show_tools = show_tools
        self._agents: list[ReviewAgent] | None = None

    @property
    def llm(self) -> BaseLLM:
        """LLM 인스턴스 (lazy initialization)."""
        if self._llm is None:
            self._llm = get_llm_from_config(AppConfig().llm)
        return self._llm

    @property
    def agents(self) -> list[ReviewAgent]:
        """에이전트 인스턴스 목록 (입력 순서 유지)."""
        if self._agents is None:
            self._agents = [
                get_agent(
                    name,
                    self.llm,
                    models=self.models,
                    tools_config=self.tools_config,
                    min_confidence=self.min_confidence,
                    max_turns=self.max_turns,
                )
                for name in self.agent_names
            ]
        return self._agents

    async def run(self, pr_info: PRInfo, context: str = "") -> AggregatedReport:
        """모든 에이전트로 리뷰하고 결과를 종합합니다.

        Args:
            pr_info: 리뷰할 변경사항
            context: 추가 컨텍스트

        Returns:
            AggregatedReport 객체
        """
        start = time.perf_counter()
        reviews, per_agent_ms = await self.run_agents(pr_info, context)
        timing = ReviewTiming(
            total_ms=int((time.perf_counter() - start) * 1000),
            per_agent_ms=per_agent_ms,
        )

        report = aggregate(reviews, self.min_confidence, timing)
        logger.info(
            f"리뷰 종합 완료: {len(report.issues)}개 이슈, "
            f"도구 호출 {report.total_tool_calls}회, 비용 ${report.total_cost:.4f}"
        )
        return report

    async def run_agents(
        self, pr_info: PRInfo, context: str = ""
    ) -> tuple[list[AgentReview], dict[str, int]]:
        """에이전트를 실행하고 리뷰와 에이전트별 실행 시간(ms)을 반환합니다.

        리뷰 목록은 완료 순서와 무관하게 에이전트 입력 순서를 따릅니다.
        """
        mode = "병렬" if self.parallel else "순차"
        logger.info(f"{len(self.agents)}개 에이전트 {mode} 실행: {', '.join(self.agent_names)}")

        durations: dict[str, int] = {}
        if self.parallel:
            reviews = await self._run_parallel(pr_info, context, durations)
        else:
            reviews = await self._run_sequential(pr_info, context, durations)

        per_agent_ms = {agent.name: durations.get(agent.name, 0) for agent in self.agents}
        return reviews, per_agent_ms

    async def _run_parallel(
        self,
        pr_info: PRInfo,
        context: str,
        durations: dict[str, int],
    ) -> list[AgentReview]:
        """에이전트를 병렬로 실행."""
        tasks = [self._timed_review(agent, pr_info, context, durations) for agent in self.agents]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        agent_reviews = []
        for result, agent in zip(results, self.agents):
            if isinstance(result, Exception):
                agent_reviews.append(self._failed_review(agent, result))
            else:
                agent_reviews.append(result)

        return agent_reviews

    async def _run_sequential(
        self,
        pr_info: PRInfo,
        context: str,
        durations: dict[str, int],
    ) -> list[AgentReview]:
        """에이전트를 순차적으로 실행."""
        agent_reviews = []
        for agent in self.agents:
            try:
                review = await self._timed_review(agent, pr_info, context, durations)
                agent_reviews.append(review)
            except Exception as e:
                agent_reviews.append(self._failed_review(agent, e))

        return agent_reviews

    async def _timed_review(
        self,
        agent: ReviewAgent,
        pr_info: PRInfo,
        context: str,
        durations: dict[str, int],
    ) -> AgentReview:
        start = time.perf_counter()
        try:
            review = await agent.review(pr_info, context, self.repo_path)
        finally:
            durations[agent.name] = int((time.perf_counter() - start) * 1000)

        if self.show_tools:
            self._log_exploration(review)
        return review

    def _log_exploration(self, review: AgentReview) -> None:
        logger.info(
            f"[{review.agent_name}] 탐색 {review.turn_count}턴, "
            f"도구 호출 {review.tool_call_count}회"
        )
        for entry in review.exploration_log:
            logger.info(f"[{review.agent_name}]   {entry}")

    @staticmethod
    def _failed_review(agent: ReviewAgent, error: Exception) -> AgentReview:
        """실패한 에이전트는 이슈 없는 리뷰로 처리."""
        logger.error(f"에이전트 {agent.name} 리뷰 실패: {error}")
        return AgentReview(
            agent_name=agent.name,
            issues=[],
            summary=f"리뷰 실행 중 오류 발생: {error}",
            outcome=ReviewOutcome.FAILED,
            error=str(error),
        )


def build_pr_info(
    path: str | Path = ".",
    staged: bool = False,
    commit_range: str | None = None,
    diff_text: str | None = None,
    title: str | None = None,
    description: str | None = None,
) -> PRInfo:
    """로컬 저장소의 변경사항으로 PRInfo를 만듭니다.

    Args:
        path: Git 저장소 경로.
        staged: True면 staged 변경사항.
        commit_range: 커밋 범위 (예: "main..feature").
        diff_text: 지정하면 Git 대신 이 diff를 사용.
        title: 제목. None이면 변경 출처에서 생성.
        description: 설명. None이면 커밋 제목 목록에서 생성.

    Returns:
        PRInfo 객체

    Raises:
        GitError: Git 명령 실행 실패 시.
    """
    author = ""
    subjects: list[str] = []

    if diff_text is None:
        git = GitClient(path)
        diff_text = git.get_diff(staged=staged, commit_range=commit_range)
        author = git.get_author()
        if commit_range:
            subjects = git.get_commit_subjects(commit_range)

    if title is None:
        if subjects:
            title = subjects[0]
        elif staged:
            title = "Staged changes"
        else:
            title = "Working tree changes"

    if description is None:
        description = "\n".join(f"- {subject}" for subject in subjects)

    return PRInfo(
        title=title,
        description=description,
        diff=diff_text,
        files=DiffParser().changed_paths(diff_text),
        author=author,
    )


async def run_review(
    path: str | Path = ".",
    staged: bool = False,
    commit_range: str | None = None,
    agents: list[str] | None = None,
    parallel: bool | None = None,
    min_confidence: int | None = None,
    max_turns: int | None = None,
    context: str = "",
    diff_text: str | None = None,
    title: str | None = None,
    description: str | None = None,
    show_tools: bool = False,
    llm: BaseLLM | None = None,
    config: AppConfig | None = None,
) -> AggregatedReport:
    """코드 리뷰를 실행하고 결과를 반환합니다.

    로컬 저장소의 diff로 PRInfo를 만들고 MultiAgentRunner로 전체 리뷰를
    실행합니다. None으로 둔 옵션은 설정 파일 값을 따릅니다.

    Returns:
        AggregatedReport 객체.
    """
    config = config or AppConfig()
    pr_info = build_pr_info(path, staged, commit_range, diff_text, title, description)

    if not pr_info.diff.strip():
        logger.info(EMPTY_DIFF_SUMMARY)
        return AggregatedReport(
            issues=[],
            agent_reviews=[],
            summary=EMPTY_DIFF_SUMMARY,
            total_cost=0.0,
        )

    runner = MultiAgentRunner(
        agents=agents or config.review.default_agents,
        llm=llm or get_llm_from_config(config.llm),
        repo_path=path,
        parallel=config.review.parallel if parallel is None else parallel,
        min_confidence=(
            config.review.min_confidence if min_confidence is None else min_confidence
        ),
        models=config.llm.models,
        tools_config=config.tools,
        max_turns=max_turns if max_turns is not None else config.review.max_turns,
        show_tools=show_tools or config.output.show_tools,
    )
    return await runner.run(pr_info, context)


def run_review_sync(**kwargs) -> AggregatedReport:
    """run_review()의 동기 버전."""
    return asyncio.run(run_review(**kwargs))
