"""Configuration management for RepoSync."""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from .descriptor import RepositoryDescriptor, validate_unique_repositories
from .errors import ConfigurationError, ValidationError
from .platform import get_platform_specific_defaults, normalize_path, validate_git_availability

load_dotenv()  # Load .env file if it exists


@dataclass
class Config:
    """Configuration class for RepoSync with validation and defaults."""

    # Storage
    base_path: Path = field(default_factory=lambda: Path.home() / ".reposync" / "repositories")

    # Repository set
    repositories_file: Optional[Path] = None

    # Synchronization
    max_workers: int = 8
    sync_on_start: bool = True
    sync_interval_minutes: int = 0  # 0 disables periodic resync
    force_on_schedule: bool = False

    # Logging
    log_level: str = "INFO"

    def __post_init__(self):
        """Validate configuration after initialization."""
        self.base_path = normalize_path(self.base_path)

        if self.repositories_file is not None:
            self.repositories_file = normalize_path(self.repositories_file)

        self.log_level = self.log_level.upper()
        valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.log_level not in valid_log_levels:
            raise ValueError(f"Invalid log level: {self.log_level}. Must be one of {valid_log_levels}")

        if self.max_workers <= 0:
            raise ValueError("max_workers must be positive")

        if self.sync_interval_minutes < 0:
            raise ValueError("sync_interval_minutes must be non-negative")


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("true", "1", "yes")


def load_configuration() -> Config:
    """Load configuration from REPOSYNC_* environment variables with platform-specific defaults."""
    try:
        platform_defaults = get_platform_specific_defaults()
        repositories_file = os.getenv("REPOSYNC_REPOSITORIES_FILE")

        return Config(
            base_path=Path(os.getenv("REPOSYNC_BASE_PATH", str(platform_defaults['base_path']))),
            repositories_file=Path(repositories_file) if repositories_file else None,
            max_workers=int(os.getenv("REPOSYNC_MAX_WORKERS", str(platform_defaults['max_workers']))),
            sync_on_start=_env_flag("REPOSYNC_SYNC_ON_START", "true"),
            sync_interval_minutes=int(
                os.getenv("REPOSYNC_SYNC_INTERVAL_MINUTES", str(platform_defaults['sync_interval_minutes']))
            ),
            force_on_schedule=_env_flag("REPOSYNC_FORCE_ON_SCHEDULE", "false"),
            log_level=os.getenv("REPOSYNC_LOG_LEVEL", platform_defaults['log_level']).upper(),
        )
    except (ValueError, TypeError) as e:
        raise ConfigurationError(f"Configuration error: {e}") from e


def parse_repositories(data) -> List[RepositoryDescriptor]:
    """
    Parse repository entries into descriptors.

    Accepts either a list of entries or an object with a ``repositories`` list.
    """
    if isinstance(data, dict):
        data = data.get("repositories")
    if not isinstance(data, list):
        raise ConfigurationError("Repository configuration must be a list or an object with a 'repositories' list")

    descriptors = [RepositoryDescriptor.from_dict(entry) for entry in data]
    try:
        validate_unique_repositories(descriptors)
    except ValidationError as e:
        raise ConfigurationError(str(e)) from e
    return descriptors


def load_repositories(config: Config) -> List[RepositoryDescriptor]:
    """Load the repository descriptors listed in ``config.repositories_file``."""
    logger = logging.getLogger('reposync.config')

    if config.repositories_file is None:
        logger.warning("No repositories file configured (REPOSYNC_REPOSITORIES_FILE)")
        return []

    try:
        with open(config.repositories_file, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ConfigurationError(f"Repositories file not found: {config.repositories_file}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in repositories file {config.repositories_file}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read repositories file {config.repositories_file}: {e}") from e

    descriptors = parse_repositories(data)
    logger.info(f"Loaded {len(descriptors)} repositories from {config.repositories_file}")
    return descriptors


def validate_configuration(config: Config) -> List[str]:
    """Validate configuration and return any errors or warnings."""
    errors = []

    # Check base path permissions
    try:
        config.base_path.mkdir(parents=True, exist_ok=True)
        test_file = config.base_path / ".test_write"
        test_file.write_text("test")
        test_file.unlink()
    except PermissionError:
        errors.append(f"ERROR: No write permission for base path: {config.base_path}")
    except OSError as e:
        errors.append(f"ERROR: Cannot access base path {config.base_path}: {e}")

    if config.repositories_file is None:
        errors.append("WARNING: REPOSYNC_REPOSITORIES_FILE is not set; no repositories will be synchronized")
    elif not config.repositories_file.is_file():
        errors.append(f"ERROR: Repositories file not found: {config.repositories_file}")

    git_available, git_error = validate_git_availability()
    if not git_available:
        errors.append(f"ERROR: {git_error}")

    if config.max_workers > 32:
        errors.append("WARNING: High max_workers may exhaust network or disk bandwidth")

    return errors
