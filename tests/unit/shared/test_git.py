"""GitClient 테스트."""

import subprocess
from pathlib import Path

import pytest

from code_scout.shared.git import GitClient, GitError, InvalidRepositoryError


class TestGitClientInit:
    """GitClient 초기화 테스트."""

    def test_opens_repository(self, git_repo: Path) -> None:
        client = GitClient(git_repo)

        assert client.path == git_repo.resolve()

    def test_accepts_string_path(self, git_repo: Path) -> None:
        client = GitClient(str(git_repo))

        assert client.path == git_repo.resolve()

    def test_invalid_repository(self, tmp_path: Path) -> None:
        """Git 저장소가 아닌 디렉토리."""
        with pytest.raises(InvalidRepositoryError):
            GitClient(tmp_path)

    def test_missing_path(self, tmp_path: Path) -> None:
        with pytest.raises(InvalidRepositoryError):
            GitClient(tmp_path / "does-not-exist")


class TestGetDiff:
    """get_diff 테스트."""

    def test_clean_working_tree(self, git_repo: Path) -> None:
        assert GitClient(git_repo).get_diff() == ""

    def test_working_tree_changes(self, git_repo: Path) -> None:
        (git_repo / "main.py").write_text("print('changed')\n")

        diff = GitClient(git_repo).get_diff()

        assert "diff --git a/main.py b/main.py" in diff
        assert "+print('changed')" in diff

    def test_staged_changes(self, git_repo: Path) -> None:
        (git_repo / "new.py").write_text("x = 1\n")
        (git_repo / "main.py").write_text("print('unstaged')\n")
        subprocess.run(["git", "add", "new.py"], cwd=git_repo, check=True)

        client = GitClient(git_repo)
        staged = client.get_diff(staged=True)

        assert "new.py" in staged
        assert "main.py" not in staged

    def test_commit_range(self, git_repo: Path) -> None:
        diff = GitClient(git_repo).get_diff(commit_range="HEAD~1..HEAD")

        assert "-    return 1" in diff
        assert "+    return 2" in diff

    def test_commit_range_ignores_staged(self, git_repo: Path) -> None:
        (git_repo / "new.py").write_text("x = 1\n")
        subprocess.run(["git", "add", "new.py"], cwd=git_repo, check=True)

        diff = GitClient(git_repo).get_diff(staged=True, commit_range="HEAD~1..HEAD")

        assert "new.py" not in diff

    def test_invalid_commit_range(self, git_repo: Path) -> None:
        with pytest.raises(GitError):
            GitClient(git_repo).get_diff(commit_range="nope..HEAD")


class TestGetHistory:
    """get_history 테스트."""

    def test_repository_history(self, git_repo: Path) -> None:
        lines = GitClient(git_repo).get_history().splitlines()

        assert len(lines) == 2
        assert lines[0].endswith("Change helper result")
        assert lines[1].endswith("Initial commit")

    def test_limit(self, git_repo: Path) -> None:
        lines = GitClient(git_repo).get_history(limit=1).splitlines()

        assert len(lines) == 1

    def test_file_history(self, git_repo: Path) -> None:
        history = GitClient(git_repo).get_history(path="main.py")

        assert "Initial commit" in history
        assert "Change helper result" not in history

    def test_unknown_file_has_no_history(self, git_repo: Path) -> None:
        assert GitClient(git_repo).get_history(path="missing.py") == ""


class TestCommitInfo:
    """커밋 제목 및 작성자 조회 테스트."""

    def test_commit_subjects(self, git_repo: Path) -> None:
        subjects = GitClient(git_repo).get_commit_subjects("HEAD~1..HEAD")

        assert subjects == ["Change helper result"]

    def test_commit_subjects_newest_first(self, git_repo: Path) -> None:
        (git_repo / "README.md").write_text("# Updated\n")
        subprocess.run(["git", "commit", "-am", "Update readme"], cwd=git_repo, check=True)

        subjects = GitClient(git_repo).get_commit_subjects("HEAD~2..HEAD")

        assert subjects == ["Update readme", "Change helper result"]

    def test_author(self, git_repo: Path) -> None:
        assert GitClient(git_repo).get_author() == "Test User"

    def test_author_of_empty_repository(self, tmp_path: Path) -> None:
        subprocess.run(["git", "init"], cwd=tmp_path, check=True, capture_output=True)

        assert GitClient(tmp_path).get_author() == ""
