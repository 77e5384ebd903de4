"""리뷰 에이전트가 사용할 수 있는 도구 정의."""

from enum import Enum
from typing import Any


class ToolName(Enum):
    """지원하는 도구 이름. 이 다섯 개가 전부입니다."""

    READ_FILE = "read_file"
    SEARCH_CODE = "search_code"
    GET_GIT_HISTORY = "get_git_history"
    FIND_SYMBOL_DEFINITION = "find_symbol_definition"
    FIND_USAGES = "find_usages"


class SymbolKind(Enum):
    """find_symbol_definition의 심볼 종류."""

    FUNCTION = "function"
    CLASS = "class"
    INTERFACE = "interface"
    TYPE = "type"
    ANY = "any"


# 모델에 전달되는 도구 스키마
REVIEW_TOOLS: list[dict[str, Any]] = [
    {
        "name": ToolName.READ_FILE.value,
        "description": (
            "Read the full contents of a file from the repository. Use this to "
            "examine specific files in detail when you need to understand "
            "implementation details, check for issues, or verify changes."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "path": {
                    "type": "string",
                    "description": (
                        "The relative path to the file from the repository root "
                        "(e.g., 'src/index.ts' or 'README.md')"
                    ),
                },
            },
            "required": ["path"],
        },
    },
    {
        "name": ToolName.SEARCH_CODE.value,
        "description": (
            "Search for code patterns across the repository using regex. Useful "
            "for finding all usages of a function, checking for similar patterns, "
            "or identifying potential issues across multiple files."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "pattern": {
                    "type": "string",
                    "description": (
                        "The regex pattern to search for (case-insensitive). Will "
                        "match across all files unless file_pattern is specified."
                    ),
                },
                "file_pattern": {
                    "type": "string",
                    "description": (
                        "Optional glob pattern to filter files (e.g., '*.py', "
                        "'src/**/*.tsx'). If not specified, searches all files."
                    ),
                },
            },
            "required": ["pattern"],
        },
    },
    {
        "name": ToolName.GET_GIT_HISTORY.value,
        "description": (
            "View the git commit history for a specific file or the entire "
            "repository. Useful for understanding how code evolved and the "
            "context of modifications."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "path": {
                    "type": "string",
                    "description": (
                        "Optional path to a specific file. If not provided, shows "
                        "repository-wide history."
                    ),
                },
                "limit": {
                    "type": "number",
                    "description": (
                        "Maximum number of commits to return (default: 10, max: 20)"
                    ),
                },
            },
            "required": [],
        },
    },
    {
        "name": ToolName.FIND_SYMBOL_DEFINITION.value,
        "description": (
            "Find where a symbol (function, class, interface, or type) is defined "
            "in the codebase. Useful for understanding the original implementation "
            "or type definition."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "symbol": {
                    "type": "string",
                    "description": (
                        "The name of the symbol to find (e.g., 'UserAuth', "
                        "'process_data')"
                    ),
                },
                "type": {
                    "type": "string",
                    "enum": [kind.value for kind in SymbolKind],
                    "description": (
                        "The type of symbol to search for. Use 'any' if uncertain "
                        "about the type."
                    ),
                },
            },
            "required": ["symbol", "type"],
        },
    },
    {
        "name": ToolName.FIND_USAGES.value,
        "description": (
            "Find all usages of a symbol across the codebase. Useful for "
            "understanding the impact of changes, finding dependencies, or "
            "checking how a function/class is used."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "symbol": {
                    "type": "string",
                    "description": "The symbol name to search for usages of",
                },
            },
            "required": ["symbol"],
        },
    },
]
