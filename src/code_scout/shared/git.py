"""Git 클라이언트 모듈."""

from pathlib import Path

from git import InvalidGitRepositoryError, NoSuchPathError, Repo
from git.exc import GitCommandError


class GitError(Exception):
    """Git 관련 에러."""

    pass


class InvalidRepositoryError(GitError):
    """유효하지 않은 Git 저장소 에러."""

    pass


class GitClient:
    """Git 저장소 클라이언트."""

    def __init__(self, path: str | Path = ".") -> None:
        """Git 저장소를 엽니다.

        Args:
            path: Git 저장소 경로. 기본값은 현재 디렉토리.

        Raises:
            InvalidRepositoryError: 유효하지 않은 Git 저장소인 경우.
        """
        self._path = Path(path).resolve()
        try:
            self._repo = Repo(self._path)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise InvalidRepositoryError(
                f"유효하지 않은 Git 저장소입니다: {self._path}"
            ) from e

    @property
    def path(self) -> Path:
        """저장소 경로를 반환합니다."""
        return self._path

    def get_diff(self, staged: bool = False, commit_range: str | None = None) -> str:
        """Git diff를 가져옵니다.

        Args:
            staged: True이면 staged 변경사항만, False이면 unstaged 변경사항.
            commit_range: 커밋 범위 (예: "HEAD~3..HEAD", "main..feature").
                         지정하면 staged 인자는 무시됩니다.

        Returns:
            diff 문자열.

        Raises:
            GitError: Git 명령 실행 실패 시.
        """
        try:
            if commit_range:
                return self._repo.git.diff(commit_range)
            elif staged:
                return self._repo.git.diff("--cached")
            else:
                return self._repo.git.diff()
        except GitCommandError as e:
            raise GitError(f"diff 가져오기 실패: {e}") from e

    def get_history(self, path: str | None = None, limit: int = 10) -> str:
        """최근 커밋 이력을 oneline 형식으로 가져옵니다.

        Args:
            path: 특정 파일 경로. None이면 저장소 전체 이력.
            limit: 가져올 커밋 수.

        Returns:
            `git log --oneline` 출력 문자열.

        Raises:
            GitError: Git 명령 실행 실패 시.
        """
        args = [f"-n{limit}", "--oneline"]
        if path:
            args.extend(["--follow", "--", path])

        try:
            return self._repo.git.log(*args)
        except GitCommandError as e:
            raise GitError(f"커밋 이력 가져오기 실패: {e.stderr or e}") from e

    def get_commit_subjects(self, commit_range: str) -> list[str]:
        """커밋 범위의 커밋 제목 목록 (최신순).

        Raises:
            GitError: Git 명령 실행 실패 시.
        """
        try:
            output = self._repo.git.log("--format=%s", commit_range)
        except GitCommandError as e:
            raise GitError(f"커밋 목록 가져오기 실패: {e}") from e
        return [line for line in output.split("\n") if line.strip()]

    def get_author(self) -> str:
        """HEAD 커밋 작성자. 빈 저장소면 빈 문자열."""
        try:
            return str(self._repo.head.commit.author)
        except ValueError:
            return ""
