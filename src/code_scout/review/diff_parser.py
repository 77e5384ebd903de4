"""Git diff 파서 모듈.

리뷰 대상 PR의 변경 파일 목록과 추가/삭제 통계를 얻기 위해 사용합니다.
"""

import re
from collections.abc import Iterator
from pathlib import Path

from code_scout.shared.models import (
    ChangeType,
    DiffHunk,
    DiffStats,
    FileDiff,
    ParsedDiff,
)

_GIT_HEADER = re.compile(r"^diff --git a/(.*) b/(.*)$")
# @@ -old_start,old_count +new_start,new_count @@ context
_HUNK_HEADER = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")


class DiffParser:
    """unified diff(git diff 출력)를 파일 단위 ParsedDiff로 변환하는 파서."""

    def parse(self, diff_text: str | None) -> ParsedDiff:
        """Git diff 텍스트를 파싱.

        Args:
            diff_text: git diff 명령의 출력 문자열

        Returns:
            ParsedDiff 객체 (files, stats, raw 포함)
        """
        files = [self._parse_file(block) for block in self._file_blocks(diff_text or "")]

        return ParsedDiff(
            files=files,
            stats=DiffStats(
                files_changed=len(files),
                total_additions=sum(f.additions for f in files),
                total_deletions=sum(f.deletions for f in files),
            ),
            raw=diff_text or "",
        )

    def changed_paths(self, diff_text: str | None) -> list[str]:
        """변경된 파일 경로 목록 (diff 등장 순서)."""
        return [f.path.as_posix() for f in self.parse(diff_text).files]

    @staticmethod
    def _file_blocks(diff_text: str) -> Iterator[list[str]]:
        """'diff --git' 줄을 기준으로 파일별 줄 묶음을 생성."""
        block: list[str] = []
        for line in diff_text.splitlines():
            if line.startswith("diff --git "):
                if block:
                    yield block
                block = [line]
            elif block:
                block.append(line)
        if block:
            yield block

    def _parse_file(self, lines: list[str]) -> FileDiff:
        header = _GIT_HEADER.match(lines[0])
        if not header:
            raise ValueError(f"Invalid diff header: {lines[0]}")

        path = header.group(2)
        old_path: Path | None = None
        change_type = ChangeType.MODIFIED
        hunks: list[DiffHunk] = []
        bodies: list[list[str]] = []
        additions = deletions = 0

        for line in lines[1:]:
            match = _HUNK_HEADER.match(line)
            if match:
                hunks.append(
                    DiffHunk(
                        old_start=int(match.group(1)),
                        old_count=int(match.group(2) or 1),
                        new_start=int(match.group(3)),
                        new_count=int(match.group(4) or 1),
                        content="",
                    )
                )
                bodies.append([])
                continue

            if not hunks:
                # 확장 헤더 영역
                if line.startswith("new file mode"):
                    change_type = ChangeType.ADDED
                elif line.startswith("deleted file mode"):
                    change_type = ChangeType.DELETED
                elif line.startswith("rename from "):
                    change_type = ChangeType.RENAMED
                    old_path = Path(line.removeprefix("rename from "))
                elif line.startswith("rename to "):
                    path = line.removeprefix("rename to ")
                continue

            bodies[-1].append(line)
            if line.startswith("+"):
                additions += 1
            elif line.startswith("-"):
                deletions += 1

        for hunk, body in zip(hunks, bodies):
            hunk.content = "\n".join(body)

        return FileDiff(
            path=Path(path),
            change_type=change_type,
            old_path=old_path,
            additions=additions,
            deletions=deletions,
            hunks=hunks,
        )
