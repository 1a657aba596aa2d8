"""Version-control capability used by the synchronizer, backed by GitPython."""

from pathlib import Path
from typing import Union

from git import Git, Repo


class GitClient:
    """
    Thin binding of the git commands RepoSync needs to one directory.

    Every method returns ``None`` on success and lets GitPython's
    ``GitCommandError``, ``InvalidGitRepositoryError`` or ``NoSuchPathError``
    propagate on failure.
    """

    def __init__(self, working_dir: Union[str, Path]):
        self.working_dir = Path(working_dir)

    def _git(self) -> Git:
        git = Git(str(self.working_dir))
        # Fail instead of waiting for a credential prompt nobody will answer
        git.update_environment(GIT_TERMINAL_PROMPT="0")
        return git

    def status(self) -> None:
        """Probe the working copy; fails unless ``working_dir`` is itself a repository."""
        repo = Repo(self.working_dir)
        try:
            repo.git.status()
        finally:
            repo.close()

    def clone(self, url: str, target_dir: str, branch: str) -> None:
        """Clone ``url`` into ``working_dir / target_dir`` checking out ``branch``."""
        self._git().clone("--branch", branch, url, target_dir)

    def pull(self, remote: str, branch: str) -> None:
        self._git().pull(remote, branch)

    def fetch(self, *flags: str) -> None:
        self._git().fetch(*flags)

    def reset(self, *flags: str) -> None:
        self._git().reset(*flags)
