#!/usr/bin/env python3
"""RepoSync MCP server entry point."""

from reposync.server import main

if __name__ == "__main__":
    main()
