"""Local mirror directory layout."""

import logging
from pathlib import Path, PurePosixPath, PureWindowsPath
from typing import Union

from ..errors import DirectoryError, InvalidRepositoryPath, MissingRepository


def get_mirror_path(base_path: Union[str, Path], repository: str) -> Path:
    """
    Directory holding the working copy of ``repository`` under ``base_path``.

    The repository name must be a single path segment so that the mirror can
    never escape the base path.
    """
    if not repository or not repository.strip():
        raise MissingRepository()

    name = repository.strip()
    if name in (".", ".."):
        raise InvalidRepositoryPath(f"Invalid repository name '{repository}': path traversal is not allowed")

    for pure in (PurePosixPath(name), PureWindowsPath(name)):
        if pure.is_absolute() or pure.anchor:
            raise InvalidRepositoryPath(f"Invalid repository name '{repository}': absolute paths are not allowed")
        if len(pure.parts) != 1:
            raise InvalidRepositoryPath(
                f"Invalid repository name '{repository}': must not contain path separators"
            )

    return Path(base_path) / name


def ensure_directory(path: Union[str, Path]) -> Path:
    """Create ``path`` and any missing parents. Existing directories are left alone."""
    logger = logging.getLogger('reposync.git_sync.paths')
    path = Path(path)

    if path.is_dir():
        return path

    logger.debug(f"Creating directory: {path}")
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise DirectoryError(path, e) from e
    return path
