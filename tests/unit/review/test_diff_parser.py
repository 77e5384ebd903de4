"""DiffParser 유닛 테스트."""

from pathlib import Path

import pytest

from code_scout.review.diff_parser import DiffParser
from code_scout.shared.models import ChangeType

MULTI_FILE_DIFF = """\
diff --git a/src/app.py b/src/app.py
index abc123..def456 100644
--- a/src/app.py
+++ b/src/app.py
@@ -10,4 +10,5 @@ def handler(request):
     user_id = request.args["id"]
-    row = db.get(user_id)
+    sql = f"SELECT * FROM users WHERE id = {user_id}"
+    row = db.execute(sql)
     return row
@@ -40 +41 @@ def helper():
-    return None
+    return {}
diff --git a/docs/notes.md b/docs/notes.md
new file mode 100644
index 0000000..1234567
--- /dev/null
+++ b/docs/notes.md
@@ -0,0 +1,2 @@
+# Notes
+++ literal plus line
diff --git a/legacy.py b/legacy.py
deleted file mode 100644
index 7654321..0000000
--- a/legacy.py
+++ /dev/null
@@ -1,2 +0,0 @@
-import os
-os.system("rm -rf /tmp/x")
"""


class TestDiffParser:
    """DiffParser 테스트 클래스."""

    @pytest.fixture
    def parser(self) -> DiffParser:
        return DiffParser()

    @pytest.mark.parametrize("diff_text", ["", "   \n\n", None])
    def test_empty_diff(self, parser: DiffParser, diff_text) -> None:
        result = parser.parse(diff_text)

        assert result.files == []
        assert result.stats.files_changed == 0
        assert result.stats.total_additions == 0
        assert result.stats.total_deletions == 0

    def test_multi_file_diff(self, parser: DiffParser) -> None:
        result = parser.parse(MULTI_FILE_DIFF)

        assert [f.path for f in result.files] == [
            Path("src/app.py"),
            Path("docs/notes.md"),
            Path("legacy.py"),
        ]
        assert [f.change_type for f in result.files] == [
            ChangeType.MODIFIED,
            ChangeType.ADDED,
            ChangeType.DELETED,
        ]
        assert result.stats.files_changed == 3
        assert result.raw == MULTI_FILE_DIFF

    def test_counts_changes(self, parser: DiffParser) -> None:
        app, notes, legacy = parser.parse(MULTI_FILE_DIFF).files

        assert (app.additions, app.deletions) == (3, 2)
        # 내용이 "++"로 시작하는 추가 줄도 한 줄로 셈
        assert (notes.additions, notes.deletions) == (2, 0)
        assert (legacy.additions, legacy.deletions) == (0, 2)

    def test_hunks(self, parser: DiffParser) -> None:
        app = parser.parse(MULTI_FILE_DIFF).files[0]

        assert len(app.hunks) == 2
        first, second = app.hunks
        assert (first.old_start, first.old_count, first.new_start, first.new_count) == (10, 4, 10, 5)
        assert first.content.startswith('     user_id = request.args["id"]')
        assert "+    row = db.execute(sql)" in first.content
        # count가 생략된 hunk 헤더는 1
        assert (second.old_start, second.old_count, second.new_start, second.new_count) == (40, 1, 41, 1)

    def test_renamed_file(self, parser: DiffParser) -> None:
        diff_text = """\
diff --git a/src/old_name.py b/src/new_name.py
similarity index 80%
rename from src/old_name.py
rename to src/new_name.py
index abc123..def456 100644
--- a/src/old_name.py
+++ b/src/new_name.py
@@ -1,2 +1,2 @@
 def function():
-    old_line
+    new_line
"""
        (renamed,) = parser.parse(diff_text).files

        assert renamed.change_type == ChangeType.RENAMED
        assert renamed.path == Path("src/new_name.py")
        assert renamed.old_path == Path("src/old_name.py")
        assert (renamed.additions, renamed.deletions) == (1, 1)

    def test_binary_file(self, parser: DiffParser) -> None:
        diff_text = """\
diff --git a/images/logo.png b/images/logo.png
new file mode 100644
index 0000000..abc1234
Binary files /dev/null and b/images/logo.png differ
"""
        (binary,) = parser.parse(diff_text).files

        assert binary.change_type == ChangeType.ADDED
        assert binary.hunks == []
        assert (binary.additions, binary.deletions) == (0, 0)

    def test_changed_paths(self, parser: DiffParser) -> None:
        assert parser.changed_paths(MULTI_FILE_DIFF) == [
            "src/app.py",
            "docs/notes.md",
            "legacy.py",
        ]

    def test_text_before_first_header_is_ignored(self, parser: DiffParser) -> None:
        result = parser.parse("commit abc\nAuthor: someone\n\n" + MULTI_FILE_DIFF)

        assert result.stats.files_changed == 3
