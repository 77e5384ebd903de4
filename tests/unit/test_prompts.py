"""프롬프트 로더 테스트."""

import pytest

from code_scout.prompts import load_prompt


def test_load_tool_guidance():
    prompt = load_prompt("review/_tools")

    for tool in ["read_file", "search_code", "get_git_history", "find_symbol_definition", "find_usages"]:
        assert tool in prompt


def test_list_values_are_joined():
    prompt = load_prompt(
        "review/_pr",
        min_confidence=70,
        title_line="**Title**: Fix\n",
        description_line="",
        files_changed=2,
        context=["first", "second"],
        diff="+x = 1",
    )

    assert "first\nsecond" in prompt
    assert "+x = 1" in prompt


def test_missing_template():
    with pytest.raises(FileNotFoundError):
        load_prompt("review/unknown")


def test_missing_variable():
    with pytest.raises(KeyError, match="Missing template variable"):
        load_prompt("review/_pr")
