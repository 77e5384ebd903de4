"""Prompts module - 프롬프트 템플릿 로더."""

from pathlib import Path

PROMPTS_DIR = Path(__file__).parent


def load_prompt(name: str, **kwargs: str | int | float | list[str]) -> str:
    """프롬프트 템플릿 로드 및 변수 치환.

    Args:
        name: 프롬프트 이름 (예: "review/security")
        **kwargs: 템플릿 변수

    Returns:
        포맷된 프롬프트 문자열

    Raises:
        FileNotFoundError: 프롬프트 파일이 존재하지 않는 경우
        KeyError: 필수 템플릿 변수가 누락된 경우
    """
    prompt_path = PROMPTS_DIR / f"{name}.md"

    if not prompt_path.exists():
        raise FileNotFoundError(f"Prompt template not found: {name}.md")

    template = prompt_path.read_text(encoding="utf-8")

    # 리스트 값은 줄 단위로 이어 붙임
    formatted_kwargs = {}
    for key, value in kwargs.items():
        if isinstance(value, list):
            formatted_kwargs[key] = "\n".join(str(item) for item in value)
        else:
            formatted_kwargs[key] = value

    try:
        return template.format(**formatted_kwargs)
    except KeyError as e:
        raise KeyError(f"Missing template variable: {e}") from e
