"""Code-Scout CLI 엔트리포인트."""

import logging
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from code_scout import __version__
from code_scout.shared.config import get_config_path, get_guidelines_path, load_config
from code_scout.shared.output import get_formatter

console = Console()


class Context:
    """CLI 컨텍스트."""

    def __init__(self):
        self.config = None
        self.format = "console"
        self.verbose = False


pass_context = click.make_pass_decorator(Context, ensure=True)


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    help="설정 파일 경로",
)
@click.option(
    "--format",
    "-f",
    type=click.Choice(["console", "json", "markdown"]),
    default=None,
    help="출력 형식 (기본: 설정 파일의 output.default_format)",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="상세 출력 (에이전트 진행 로그 포함)",
)
@click.version_option(version=__version__, prog_name="code-scout")
@pass_context
def cli(ctx: Context, config: str | None, format: str | None, verbose: bool):
    """Code-Scout: 코드베이스를 탐색하는 AI Multi-Agent 코드 리뷰 도구."""
    try:
        ctx.config = load_config(Path(config) if config else None)
    except (ValueError, TypeError) as e:
        console.print(f"[red]설정 파일 오류:[/red] {e}")
        raise click.Abort()

    ctx.format = format or ctx.config.output.default_format
    ctx.verbose = verbose

    if verbose:
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )


# ============================================================
# Review 명령어
# ============================================================


@cli.command()
@click.argument("commit_range", required=False)
@click.option("--staged", is_flag=True, help="스테이지된 변경만 리뷰")
@click.option(
    "--repo",
    "-r",
    default=".",
    type=click.Path(exists=True, file_okay=False),
    help="리뷰할 저장소 경로 (도구 탐색 루트)",
)
@click.option(
    "--diff-file",
    type=click.Path(exists=True, dir_okay=False),
    help="Git 대신 사용할 diff 파일",
)
@click.option("--title", help="변경사항 제목")
@click.option("--description", help="변경사항 설명")
@click.option("--context", "extra_context", help="에이전트에 전달할 추가 컨텍스트")
@click.option(
    "--guidelines",
    "-g",
    type=click.Path(exists=True, dir_okay=False),
    help="리뷰 가이드라인 markdown 파일 (기본: 설정 파일의 review.guidelines)",
)
@click.option(
    "--agents",
    "-a",
    multiple=True,
    help="사용할 에이전트 (기본: 설정 파일의 review.default_agents)",
)
@click.option("--sequential", is_flag=True, help="에이전트를 순차적으로 실행")
@click.option("--min-confidence", type=click.IntRange(0, 100), help="보고할 최소 confidence")
@click.option("--max-turns", type=click.IntRange(min=1), help="에이전트별 최대 턴 수 덮어쓰기")
@click.option("--show-tools", is_flag=True, help="에이전트의 도구 사용 내역 표시")
@pass_context
def review(
    ctx: Context,
    commit_range: str | None,
    staged: bool,
    repo: str,
    diff_file: str | None,
    title: str | None,
    description: str | None,
    extra_context: str | None,
    guidelines: str | None,
    agents: tuple,
    sequential: bool,
    min_confidence: int | None,
    max_turns: int | None,
    show_tools: bool,
):
    """코드베이스를 탐색하는 AI Multi-Agent 코드 리뷰."""
    from code_scout.review import run_review_sync

    agent_list = list(agents) if agents else ctx.config.review.default_agents
    parallel = not sequential and ctx.config.review.parallel
    show_tools = show_tools or ctx.config.output.show_tools

    if diff_file:
        console.print(f"[bold]diff 파일 리뷰:[/bold] {diff_file}")
    elif staged:
        console.print("[bold]스테이지된 변경 리뷰[/bold]")
    elif commit_range:
        console.print(f"[bold]커밋 범위 리뷰:[/bold] {commit_range}")
    else:
        console.print("[bold]작업 디렉토리 변경 리뷰[/bold]")

    console.print(f"[dim]에이전트: {', '.join(agent_list)}[/dim]")

    context = _build_context(ctx, repo, guidelines, extra_context)

    try:
        diff_text = Path(diff_file).read_text(encoding="utf-8") if diff_file else None

        with console.status("[bold green]리뷰 진행 중..."):
            result = run_review_sync(
                path=repo,
                staged=staged,
                commit_range=commit_range,
                agents=agent_list,
                parallel=parallel,
                min_confidence=min_confidence,
                max_turns=max_turns,
                context=context,
                diff_text=diff_text,
                title=title,
                description=description,
                show_tools=show_tools,
                config=ctx.config,
            )

        formatter = get_formatter(ctx.format, show_tools=show_tools)
        output = formatter.format(result)
        if ctx.format != "console":
            click.echo(output)
    except Exception as e:
        console.print(f"[red]오류:[/red] {e}")
        if ctx.verbose:
            import traceback

            console.print(traceback.format_exc())
        raise click.Abort()


def _build_context(
    ctx: Context, repo: str, guidelines: str | None, extra_context: str | None
) -> str:
    """가이드라인 파일과 추가 컨텍스트를 합쳐 에이전트 컨텍스트 생성.

    --guidelines가 없으면 설정 파일의 저장소별 / 기본 가이드라인을 사용합니다.
    """
    if guidelines:
        guidelines_path = Path(guidelines)
    else:
        guidelines_path = get_guidelines_path(ctx.config.review, repo)
        if guidelines_path:
            console.print(f"[dim]설정의 가이드라인 사용: {guidelines_path}[/dim]")

    parts = []
    if guidelines_path:
        if not guidelines_path.is_file():
            console.print(f"[red]가이드라인 파일을 찾을 수 없습니다:[/red] {guidelines_path}")
            raise click.Abort()
        parts.append(guidelines_path.read_text(encoding="utf-8").strip())
    if extra_context:
        parts.append(extra_context)
    return "\n\n".join(parts)


# ============================================================
# Agents 명령어
# ============================================================


@cli.command("agents")
@pass_context
def list_agents(ctx: Context):
    """사용 가능한 리뷰 에이전트 목록."""
    from code_scout.review.agents import get_agent_config, get_available_agents

    models = ctx.config.llm.models

    table = Table(title="Review Agents", show_header=True)
    table.add_column("Key", style="cyan")
    table.add_column("Name", style="bold")
    table.add_column("Model", style="magenta")
    table.add_column("Max Turns", style="green")
    table.add_column("Focus")

    for name in get_available_agents():
        agent = get_agent_config(name, ctx.config.review.max_turns)
        model = models.get(agent.model)
        model_label = f"{agent.model} ({model.id})" if model else agent.model
        table.add_row(agent.key, agent.name, model_label, str(agent.max_turns), agent.focus)

    console.print(table)


# ============================================================
# Config 명령어 그룹
# ============================================================


@cli.group()
@pass_context
def config(ctx: Context):
    """설정 관리."""
    pass


@config.command("show")
@pass_context
def config_show(ctx: Context):
    """현재 설정 표시."""
    config_path = get_config_path()

    if config_path:
        console.print(f"[bold]설정 파일:[/bold] {config_path}")
    else:
        console.print("[dim]설정 파일 없음 (기본값 사용)[/dim]")

    llm = ctx.config.llm
    console.print()
    console.print("[bold]LLM 설정:[/bold]")
    console.print(f"  Provider: {llm.provider}")
    console.print(f"  API Key Env: {llm.api_key_env}")
    console.print(f"  Timeout: {llm.timeout_seconds}s (재시도 {llm.max_retries}회)")
    for name, model in llm.models.items():
        thinking = f", thinking {model.thinking_budget}" if model.thinking_budget else ""
        console.print(f"  Model [{name}]: {model.id} (max_tokens {model.max_tokens}{thinking})")

    review_config = ctx.config.review
    console.print()
    console.print("[bold]리뷰 설정:[/bold]")
    console.print(f"  기본 에이전트: {', '.join(review_config.default_agents)}")
    console.print(f"  병렬 실행: {review_config.parallel}")
    console.print(f"  최소 confidence: {review_config.min_confidence}")
    if review_config.max_turns:
        console.print(f"  최대 턴 수: {review_config.max_turns}")
    if review_config.guidelines:
        console.print(f"  가이드라인: {review_config.guidelines}")
    for repo_key, path in review_config.repo_guidelines.items():
        console.print(f"  가이드라인 [{repo_key}]: {path}")

    tools = ctx.config.tools
    console.print()
    console.print("[bold]도구 설정:[/bold]")
    console.print(f"  최대 파일 크기: {tools.max_file_size_kb}KB")
    console.print(f"  최대 검색 결과: {tools.max_search_lines}줄")
    console.print(f"  최대 커밋 수: {tools.max_git_commits}")


@config.command("init")
@click.option("--force", is_flag=True, help="기존 파일 덮어쓰기")
@pass_context
def config_init(ctx: Context, force: bool):
    """기본 설정 파일 생성."""
    import dataclasses

    import yaml

    from code_scout.shared.config import AppConfig

    target = Path.cwd() / ".code-scout.yaml"

    if target.exists() and not force:
        console.print(f"[red]설정 파일이 이미 존재합니다:[/red] {target}")
        console.print("[dim]--force 옵션으로 덮어쓰기 가능[/dim]")
        return

    target.write_text(
        yaml.safe_dump(dataclasses.asdict(AppConfig()), sort_keys=False, allow_unicode=True),
        encoding="utf-8",
    )
    console.print(f"[green]설정 파일 생성됨:[/green] {target}")


if __name__ == "__main__":
    cli()
