"""샌드박스 도구 실행기.

리뷰 에이전트가 요청한 읽기 전용 도구를 고정된 저장소 루트 안에서만 실행합니다.
모든 실패는 예외 대신 ToolExecutionResult에 기록되어 모델에게 전달됩니다.
"""

import asyncio
import fnmatch
import logging
import os
import posixpath
import re
import subprocess
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

from code_scout.shared.config import ToolsConfig
from code_scout.shared.git import GitClient, GitError
from code_scout.shared.models import ToolExecutionResult

from .tools import SymbolKind, ToolName

logger = logging.getLogger(__name__)

NO_MATCHES = "No matches found."
NO_HISTORY = "No commit history found."


class ToolError(Exception):
    """도구 실행 에러 베이스 클래스."""

    pass


class ToolValidationError(ToolError):
    """잘못된 입력 (위험한 경로, 누락된 파라미터, 알 수 없는 도구 등)."""

    pass


class ToolNotFoundError(ToolValidationError):
    """요청한 파일이 존재하지 않음."""

    pass


class ToolTooLargeError(ToolValidationError):
    """파일 크기 제한 초과."""

    pass


class ToolBackendError(ToolError):
    """검색/이력 백엔드 실패 ("매치 없음"은 해당하지 않음)."""

    pass


def validate_path(file_path: str) -> str:
    """저장소 상대 경로를 정규화하고 루트 밖으로 나가는 경로를 거부합니다.

    Args:
        file_path: 모델이 요청한 경로

    Returns:
        정규화된 상대 경로 (POSIX 형식)

    Raises:
        ToolValidationError: 절대 경로이거나 ".." 세그먼트를 포함하는 경우
    """
    if not file_path or not file_path.strip():
        raise ToolValidationError("Path must not be empty")

    if os.path.isabs(file_path) or posixpath.isabs(file_path):
        raise ToolValidationError("Absolute paths are not allowed")

    normalized = posixpath.normpath(file_path.replace("\\", "/"))
    if ".." in normalized.split("/"):
        raise ToolValidationError("Directory traversal is not allowed")

    return normalized


def _symbol_pattern(symbol: str, kind: str) -> str:
    """심볼 종류별 정의 검색 정규식."""
    s = re.escape(symbol)
    patterns = {
        SymbolKind.FUNCTION.value: (
            rf"(function\s+{s}|const\s+{s}\s*=|def\s+{s}\s*\(|"
            rf"{s}\s*\([^)]*\)\s*\{{|{s}:\s*\([^)]*\)\s*=>)"
        ),
        SymbolKind.CLASS.value: rf"class\s+{s}",
        SymbolKind.INTERFACE.value: rf"interface\s+{s}",
        SymbolKind.TYPE.value: rf"type\s+{s}",
        SymbolKind.ANY.value: rf"(class|interface|type|function|const|def)\s+{s}",
    }
    return patterns.get(kind, s)


class ToolExecutor:
    """도구 실행기.

    하나의 저장소 루트에 묶이며, 에이전트마다 별도의 인스턴스를 사용합니다.
    모든 도구가 읽기 전용이므로 여러 인스턴스가 같은 루트를 동시에 읽어도 안전합니다.
    """

    def __init__(self, repo_path: str | Path, config: ToolsConfig | None = None) -> None:
        """ToolExecutor 초기화.

        Args:
            repo_path: 저장소 루트 경로
            config: 도구 제한 설정. None이면 기본값 사용.
        """
        self.repo_path = Path(repo_path).resolve()
        self.config = config or ToolsConfig()
        self._handlers: dict[ToolName, Callable[[dict[str, Any]], str]] = {
            ToolName.READ_FILE: self._handle_read_file,
            ToolName.SEARCH_CODE: self._handle_search_code,
            ToolName.GET_GIT_HISTORY: self._handle_git_history,
            ToolName.FIND_SYMBOL_DEFINITION: self._handle_find_symbol,
            ToolName.FIND_USAGES: self._handle_find_usages,
        }

    async def execute(self, tool_name: str, tool_input: Any) -> ToolExecutionResult:
        """도구를 실행합니다. 절대 예외를 던지지 않습니다.

        Args:
            tool_name: 도구 이름
            tool_input: 도구 입력 (모델이 보낸 JSON 객체)

        Returns:
            ToolExecutionResult (성공/실패와 실행 시간 포함)
        """
        start = time.perf_counter()
        try:
            result = await asyncio.to_thread(self._dispatch, tool_name, tool_input)
            return ToolExecutionResult(
                success=True,
                result=result,
                execution_time_ms=self._elapsed_ms(start),
            )
        except ToolError as e:
            logger.debug(f"도구 실행 실패 {tool_name}: {e}")
            return ToolExecutionResult(
                success=False,
                error=str(e),
                execution_time_ms=self._elapsed_ms(start),
            )
        except Exception as e:
            logger.exception(f"도구 실행 중 예기치 않은 오류 {tool_name}")
            return ToolExecutionResult(
                success=False,
                error=f"Unexpected error: {e}",
                execution_time_ms=self._elapsed_ms(start),
            )

    def _dispatch(self, tool_name: str, tool_input: Any) -> str:
        try:
            tool = ToolName(tool_name)
        except ValueError:
            raise ToolValidationError(f"Unknown tool: {tool_name}") from None

        if not isinstance(tool_input, dict):
            raise ToolValidationError("Tool input must be an object")

        return self._handlers[tool](tool_input)

    @staticmethod
    def _elapsed_ms(start: float) -> int:
        return int((time.perf_counter() - start) * 1000)

    @staticmethod
    def _require_str(tool_input: dict[str, Any], key: str) -> str:
        value = tool_input.get(key)
        if not isinstance(value, str) or not value:
            raise ToolValidationError(f"Missing required parameter: {key}")
        return value

    # ============================================================
    # 도구 핸들러
    # ============================================================

    def _handle_read_file(self, tool_input: dict[str, Any]) -> str:
        return self.read_file(self._require_str(tool_input, "path"))

    def _handle_search_code(self, tool_input: dict[str, Any]) -> str:
        file_pattern = tool_input.get("file_pattern") or None
        return self.search_code(self._require_str(tool_input, "pattern"), file_pattern)

    def _handle_git_history(self, tool_input: dict[str, Any]) -> str:
        limit = tool_input.get("limit") or self.config.default_git_commits
        try:
            limit = int(limit)
        except (TypeError, ValueError):
            raise ToolValidationError(f"Invalid limit: {limit}") from None
        return self.get_git_history(tool_input.get("path") or None, limit)

    def _handle_find_symbol(self, tool_input: dict[str, Any]) -> str:
        symbol = self._require_str(tool_input, "symbol")
        kind = tool_input.get("type") or SymbolKind.ANY.value
        return self.find_symbol_definition(symbol, kind)

    def _handle_find_usages(self, tool_input: dict[str, Any]) -> str:
        return self.find_usages(self._require_str(tool_input, "symbol"))

    # ============================================================
    # 도구 구현
    # ============================================================

    def read_file(self, file_path: str) -> str:
        """저장소의 파일 전체 내용을 읽습니다.

        Raises:
            ToolValidationError: 경로가 안전하지 않은 경우
            ToolNotFoundError: 파일이 없는 경우
            ToolTooLargeError: 파일이 크기 제한을 넘는 경우
        """
        relative = validate_path(file_path)
        full_path = (self.repo_path / relative).resolve()

        # 심볼릭 링크로 루트 밖을 가리키는 경우
        if not full_path.is_relative_to(self.repo_path):
            raise ToolValidationError("Path resolves outside the repository")

        if not full_path.is_file():
            raise ToolNotFoundError(f"File not found: {file_path}")

        max_bytes = self.config.max_file_size_kb * 1024
        size = full_path.stat().st_size
        if size > max_bytes:
            raise ToolTooLargeError(
                f"File too large ({round(size / 1024)}KB). "
                f"Maximum size is {self.config.max_file_size_kb}KB."
            )

        return full_path.read_text(encoding="utf-8", errors="replace")

    def search_code(self, pattern: str, file_pattern: str | None = None) -> str:
        """대소문자 구분 없는 정규식 검색.

        ripgrep을 먼저 시도하고, 실패하면 Python 구현으로 대체합니다.
        """
        try:
            lines = self._search_with_ripgrep(pattern, file_pattern)
        except ToolBackendError as e:
            logger.debug(f"ripgrep 사용 불가, Python 검색으로 대체: {e}")
            lines = self._search_with_python(pattern, file_pattern)

        return self._format_matches(lines)

    def get_git_history(self, file_path: str | None = None, limit: int = 10) -> str:
        """최근 커밋 이력 (oneline)."""
        actual_limit = max(1, min(limit, self.config.max_git_commits))
        relative = validate_path(file_path) if file_path else None

        try:
            output = GitClient(self.repo_path).get_history(relative, actual_limit)
        except GitError as e:
            raise ToolBackendError(f"Git history failed: {e}") from e

        return output or NO_HISTORY

    def find_symbol_definition(self, symbol: str, kind: str) -> str:
        """심볼 정의 위치 검색."""
        return self.search_code(_symbol_pattern(symbol, kind))

    def find_usages(self, symbol: str) -> str:
        """심볼 사용처 검색 (단어 경계 기준)."""
        return self.search_code(rf"\b{re.escape(symbol)}\b")

    # ============================================================
    # 검색 백엔드
    # ============================================================

    def _search_with_ripgrep(self, pattern: str, file_pattern: str | None) -> list[str]:
        args = ["rg", "-n", "-i", "--no-heading", "--color", "never", "--sort", "path"]
        if file_pattern:
            args.extend(["-g", file_pattern])
        args.extend(["-e", pattern, "."])

        try:
            proc = subprocess.run(
                args,
                cwd=self.repo_path,
                capture_output=True,
                text=True,
                errors="replace",
                timeout=self.config.search_timeout_seconds,
                stdin=subprocess.DEVNULL,
            )
        except FileNotFoundError as e:
            raise ToolBackendError("ripgrep is not installed") from e
        except subprocess.TimeoutExpired as e:
            raise ToolBackendError("ripgrep timed out") from e

        # 종료 코드 1은 매치 없음
        if proc.returncode == 1:
            return []
        if proc.returncode != 0:
            raise ToolBackendError(f"ripgrep failed: {proc.stderr.strip()}")

        return [
            line.removeprefix("./")
            for line in proc.stdout.split("\n")
            if line.strip()
        ]

    def _search_with_python(self, pattern: str, file_pattern: str | None) -> list[str]:
        try:
            regex = re.compile(pattern, re.IGNORECASE)
        except re.error as e:
            raise ToolBackendError(f"Invalid search pattern: {e}") from e

        deadline = time.monotonic() + self.config.search_timeout_seconds
        matches: list[str] = []

        for dirpath, dirnames, filenames in os.walk(self.repo_path):
            dirnames[:] = sorted(d for d in dirnames if d != ".git")

            for filename in sorted(filenames):
                full_path = Path(dirpath) / filename
                # 저장소 밖을 가리키는 심볼릭 링크는 읽지 않음
                if full_path.is_symlink() and not full_path.resolve().is_relative_to(
                    self.repo_path
                ):
                    continue
                relative = full_path.relative_to(self.repo_path).as_posix()
                if file_pattern and not self._glob_matches(relative, file_pattern):
                    continue

                try:
                    text = full_path.read_text(encoding="utf-8")
                except (UnicodeDecodeError, OSError):
                    continue

                for lineno, line in enumerate(text.splitlines(), start=1):
                    if regex.search(line):
                        matches.append(f"{relative}:{lineno}:{line}")

                if time.monotonic() > deadline:
                    raise ToolBackendError("Search timed out")

        return matches

    @staticmethod
    def _glob_matches(relative: str, file_pattern: str) -> bool:
        if "/" in file_pattern:
            return fnmatch.fnmatch(relative, file_pattern)
        return fnmatch.fnmatch(posixpath.basename(relative), file_pattern)

    def _format_matches(self, lines: list[str]) -> str:
        if not lines:
            return NO_MATCHES

        cap = self.config.max_search_lines
        if len(lines) > cap:
            omitted = len(lines) - cap
            return (
                "\n".join(lines[:cap])
                + f"\n\n... ({omitted} more matches omitted. Refine your search pattern.)"
            )
        return "\n".join(lines)
