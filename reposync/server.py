"""MCP server exposing repository synchronization as tools."""

import logging
import sys
import threading
from typing import List, Optional

from mcp.server.fastmcp import FastMCP

from .config import Config, load_configuration, load_repositories, validate_configuration
from .descriptor import RepositoryDescriptor
from .errors import RepoSyncError, error_handler
from .git_sync import SyncCoordinator
from .logging_config import mask_credentials, setup_logging
from .url_builders import build_repository_url, get_builder


def describe_repository(descriptor: RepositoryDescriptor) -> dict:
    """Public view of a descriptor: no token, masked URL."""
    try:
        url = mask_credentials(build_repository_url(descriptor, get_builder(descriptor.name)))
    except RepoSyncError as e:
        url = None
        error = str(e)
    else:
        error = None

    result = {
        "repository": descriptor.repository,
        "provider": descriptor.name,
        "host": descriptor.host,
        "organization": descriptor.organization,
        "branch": descriptor.branch,
        "protocol": descriptor.protocol,
        "private": descriptor.auth is not None,
        "url": url,
    }
    if error:
        result["error"] = error
    return result


def register_tools(server: FastMCP, coordinator: SyncCoordinator) -> None:
    """Register MCP tools with the server instance."""

    @server.tool()
    def sync_repositories(force: bool = False) -> dict:
        """
        Synchronize every configured repository with its local mirror.

        Existing mirrors are pulled, missing ones are cloned. With force=True
        existing mirrors are fetched and hard reset to the remote branch first,
        discarding any local changes.

        Returns:
            Report with one outcome per repository
        """
        return coordinator.sync_all(force=force).to_dict()

    @server.tool()
    def sync_repository(repository: str, force: bool = False) -> dict:
        """
        Synchronize a single configured repository.

        Args:
            repository: Repository name as configured (e.g. "svc-a")
            force: Discard local changes with fetch + hard reset before pulling
        """
        try:
            return coordinator.sync_one(repository, force=force).to_dict()
        except RepoSyncError as e:
            return error_handler.handle_sync_error(e, {"repository": repository}).to_dict()

    @server.tool()
    def list_repositories() -> List[dict]:
        """List configured repositories with their (credential-masked) fetch URLs."""
        return [describe_repository(descriptor) for descriptor in coordinator.descriptors]

    @server.tool()
    def repository_status(repository: str) -> dict:
        """
        Report whether the local mirror of a repository is a usable working copy.

        Args:
            repository: Repository name as configured
        """
        try:
            synchronizer = coordinator.create_synchronizer(repository)
        except (RepoSyncError, OSError) as e:
            return error_handler.handle_sync_error(e, {"repository": repository}).to_dict()

        return {
            "repository": repository,
            "path": str(synchronizer.mirror_path),
            "is_git_repository": synchronizer.is_git_repository(),
            "branch": synchronizer.branch,
            "url": synchronizer.masked_url,
        }

    init_logger = logging.getLogger('reposync.init')
    init_logger.info("MCP tools registered successfully")


def create_coordinator(config: Config) -> SyncCoordinator:
    """Load the repository set and build its coordinator."""
    descriptors = load_repositories(config)
    return SyncCoordinator(descriptors, config.base_path, max_workers=config.max_workers)


def initialize_server(config: Optional[Config] = None) -> tuple[FastMCP, SyncCoordinator, Config]:
    """Initialize the MCP server, validating configuration first."""
    server_config = config or load_configuration()
    setup_logging(server_config.log_level)
    init_logger = logging.getLogger('reposync.init')

    validation_issues = validate_configuration(server_config)
    for issue in validation_issues:
        if issue.startswith("ERROR:"):
            init_logger.error(issue[7:])
        elif issue.startswith("WARNING:"):
            init_logger.warning(issue[9:])

    error_count = sum(1 for issue in validation_issues if issue.startswith("ERROR:"))
    if error_count > 0:
        init_logger.critical(f"Server startup failed due to {error_count} configuration error(s)")
        sys.exit(1)

    init_logger.info("Configuration loaded successfully")

    coordinator = create_coordinator(server_config)
    server = FastMCP("RepoSync")
    register_tools(server, coordinator)

    return server, coordinator, server_config


def run_sync_pass(coordinator: SyncCoordinator, force: bool = False) -> None:
    """Run one full synchronization pass, logging instead of raising."""
    logger = logging.getLogger('reposync.scheduler')
    try:
        report = coordinator.sync_all(force=force)
    except Exception as e:
        logger.error(f"Synchronization pass failed: {mask_credentials(str(e))}", exc_info=True)
        return
    if not report.success:
        logger.warning(f"{len(report.failed)} repositories failed to synchronize")


def start_initial_sync(coordinator: SyncCoordinator) -> threading.Thread:
    """Synchronize all repositories in the background while the server starts."""
    thread = threading.Thread(
        target=run_sync_pass, args=(coordinator,), name="reposync-initial-sync", daemon=True
    )
    thread.start()
    return thread


def start_periodic_sync(
    coordinator: SyncCoordinator,
    interval_minutes: int,
    force: bool = False,
    stop_event: Optional[threading.Event] = None
) -> threading.Thread:
    """Start a daemon thread re-synchronizing every ``interval_minutes``."""
    stop_event = stop_event or threading.Event()
    logger = logging.getLogger('reposync.scheduler')

    def periodic_sync():
        while not stop_event.wait(interval_minutes * 60):
            run_sync_pass(coordinator, force=force)

    thread = threading.Thread(target=periodic_sync, name="reposync-periodic-sync", daemon=True)
    thread.start()
    logger.info(f"Periodic synchronization every {interval_minutes} minute(s) started")
    return thread


def main():
    """Main entry point for the RepoSync server with stdio transport."""
    startup_logger = None

    try:
        logging.basicConfig(
            level=logging.INFO,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        startup_logger = logging.getLogger('reposync.startup')

        startup_logger.info("=" * 60)
        startup_logger.info("RepoSync MCP Server")
        startup_logger.info("=" * 60)

        python_version = f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"
        if sys.version_info < (3, 10):
            startup_logger.error(f"Python 3.10+ required, found {python_version}")
            sys.exit(1)

        server, coordinator, config = initialize_server()

        if config.sync_on_start:
            start_initial_sync(coordinator)
        if config.sync_interval_minutes > 0:
            start_periodic_sync(coordinator, config.sync_interval_minutes, force=config.force_on_schedule)

        startup_logger.info("Starting server with stdio transport")
        server.run(transport="stdio")

    except KeyboardInterrupt:
        if startup_logger:
            startup_logger.info("Server stopped by user (Ctrl+C)")
    except SystemExit:
        raise
    except Exception as e:
        if startup_logger:
            startup_logger.critical(f"Server failed to start: {mask_credentials(str(e))}", exc_info=True)
        sys.exit(1)
