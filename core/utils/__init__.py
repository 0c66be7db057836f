"""
Core Utilities Package

Chua cac utility modules:
- repo_manager: Shallow clone remote repositories
"""

from core.utils.repo_manager import (
    RepoError,
    GitNotInstalledError,
    check_git_installed,
    clone_repo,
    is_remote_url,
)

__all__ = [
    "RepoError",
    "GitNotInstalledError",
    "check_git_installed",
    "clone_repo",
    "is_remote_url",
]
