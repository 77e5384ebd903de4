"""Configuration management - YAML 설정 로더 및 스키마."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml


@dataclass
class ModelPricing:
    """백만 토큰당 가격 (USD)."""

    input: float
    output: float


@dataclass
class ModelConfig:
    """모델 설정."""

    id: str
    max_tokens: int = 4000
    pricing: ModelPricing = field(default_factory=lambda: ModelPricing(3.0, 15.0))
    thinking_budget: int | None = None  # None이면 extended thinking 비활성


def default_models() -> dict[str, ModelConfig]:
    return {
        "haiku": ModelConfig(
            id="claude-haiku-4-5-20251001",
            max_tokens=4000,
            pricing=ModelPricing(input=0.25, output=1.25),
        ),
        "sonnet": ModelConfig(
            id="claude-sonnet-4-5-20250929",
            max_tokens=4000,
            pricing=ModelPricing(input=3.0, output=15.0),
        ),
        "opus": ModelConfig(
            id="claude-opus-4-5-20251101",
            max_tokens=16000,
            pricing=ModelPricing(input=3.0, output=15.0),
            thinking_budget=10000,
        ),
    }


@dataclass
class LLMConfig:
    """LLM 설정."""

    provider: str = "anthropic"
    api_key_env: str = "ANTHROPIC_API_KEY"
    temperature: float = 0.3
    timeout_seconds: float = 300.0
    max_retries: int = 2
    models: dict[str, ModelConfig] = field(default_factory=default_models)


@dataclass
class ToolsConfig:
    """샌드박스 도구 제한."""

    max_file_size_kb: int = 50
    max_search_lines: int = 100
    max_git_commits: int = 20
    default_git_commits: int = 10
    search_timeout_seconds: float = 30.0


@dataclass
class ReviewConfig:
    """리뷰 설정."""

    default_agents: list[str] = field(
        default_factory=lambda: ["security", "logic", "performance", "style"]
    )
    parallel: bool = True
    min_confidence: int = 70
    max_turns: int | None = None  # 모든 에이전트의 최대 턴 수 덮어쓰기
    guidelines: str | None = None  # 기본 리뷰 가이드라인 파일
    repo_guidelines: dict[str, str] = field(default_factory=dict)  # 저장소별 가이드라인 파일


@dataclass
class OutputConfig:
    """출력 설정."""

    default_format: str = "console"
    show_tools: bool = False


@dataclass
class AppConfig:
    """애플리케이션 전체 설정."""

    llm: LLMConfig = field(default_factory=LLMConfig)
    tools: ToolsConfig = field(default_factory=ToolsConfig)
    review: ReviewConfig = field(default_factory=ReviewConfig)
    output: OutputConfig = field(default_factory=OutputConfig)


def _parse_models(data: dict[str, Any]) -> dict[str, ModelConfig]:
    """모델 카탈로그 파싱. 기본 카탈로그 위에 덮어씁니다."""
    models = default_models()
    for name, model_data in data.items():
        model_data = dict(model_data or {})
        pricing_data = model_data.pop("pricing", None)
        base = models.get(name)

        if base is None and "id" not in model_data:
            raise ValueError(f"모델 '{name}'에 id가 필요합니다.")

        merged = {
            "id": base.id if base else None,
            "max_tokens": base.max_tokens if base else 4000,
            "thinking_budget": base.thinking_budget if base else None,
        }
        merged.update(model_data)

        if pricing_data:
            pricing = ModelPricing(**pricing_data)
        elif base:
            pricing = base.pricing
        else:
            pricing = ModelPricing(3.0, 15.0)

        models[name] = ModelConfig(pricing=pricing, **merged)
    return models


def _dict_to_config(data: dict[str, Any]) -> AppConfig:
    """딕셔너리를 AppConfig로 변환."""
    llm_data = dict(data.get("llm", {}))
    models = _parse_models(llm_data.pop("models", {}) or {})

    return AppConfig(
        llm=LLMConfig(models=models, **llm_data),
        tools=ToolsConfig(**data.get("tools", {})),
        review=ReviewConfig(**data.get("review", {})),
        output=OutputConfig(**data.get("output", {})),
    )


def _search_paths() -> list[Path]:
    return [
        Path.cwd() / ".code-scout.yaml",
        Path.cwd() / ".code-scout.yml",
        get_global_config_path(),
    ]


def load_config(config_path: Path | None = None) -> AppConfig:
    """설정 파일 로드.

    Args:
        config_path: 설정 파일 경로. None이면 기본 경로 탐색.

    Returns:
        AppConfig 인스턴스
    """
    search_paths = [config_path, *_search_paths()]

    for path in search_paths:
        if path and path.exists():
            with open(path) as f:
                data = yaml.safe_load(f) or {}
            return _dict_to_config(data)

    # 설정 파일 없으면 기본값 사용
    return AppConfig()


def get_guidelines_path(review: ReviewConfig, repo_path: str | Path = ".") -> Path | None:
    """저장소에 적용할 리뷰 가이드라인 파일 경로.

    repo_guidelines의 키는 저장소 디렉토리 이름 또는 저장소 경로입니다.
    일치하는 항목이 없으면 guidelines 기본값을 사용합니다.

    Args:
        review: 리뷰 설정
        repo_path: 리뷰할 저장소 경로

    Returns:
        가이드라인 파일 경로. 설정이 없으면 None.
    """
    repo_dir = Path(repo_path).resolve()

    for key, path in review.repo_guidelines.items():
        if key == repo_dir.name or Path(key).expanduser().resolve() == repo_dir:
            return Path(path).expanduser()

    if review.guidelines:
        return Path(review.guidelines).expanduser()
    return None


def get_config_path() -> Path | None:
    """현재 사용 중인 설정 파일 경로 반환."""
    for path in _search_paths():
        if path.exists():
            return path

    return None


def get_global_config_path() -> Path:
    """전역 설정 파일 경로 반환."""
    return Path.home() / ".config" / "code-scout" / "config.yaml"
