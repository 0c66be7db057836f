"""
Repo Manager - Shallow clone remote repositories vao thu muc tam.

Module nay cung cap:
- is_remote_url(): Input co phai la git URL khong
- check_git_installed(): Kiem tra git MOT LAN truoc khi clone
- clone_repo(): git clone --depth 1 vao TemporaryDirectory

Thu muc tam bi xoa khi caller goi cleanup() (hoac khi object bi thu hoi).
"""

import logging
import shutil
import subprocess
import tempfile
from typing import Optional

# Configure logger
logger = logging.getLogger(__name__)


# ============================================
# Error Classes
# ============================================


class RepoError(Exception):
    """Base error cho repo operations."""

    pass


class GitNotInstalledError(RepoError):
    """Git khong duoc cai dat."""

    pass


class RepoNotFoundError(RepoError):
    """Repository khong tim thay hoac private."""

    pass


class CloneTimeoutError(RepoError):
    """Clone operation bi timeout."""

    pass


class InvalidUrlError(RepoError):
    """URL khong hop le."""

    pass


# Clone timeout (seconds)
DEFAULT_TIMEOUT = 120

_REMOTE_PREFIXES = ("http://", "https://", "git@", "ssh://")


def is_remote_url(value: str) -> bool:
    """
    Kiem tra input co phai remote git URL khong.

    Args:
        value: Input tu CLI (path hoac URL)

    Returns:
        True neu la http(s)://, ssh:// hoac git@ URL
    """
    return value.strip().startswith(_REMOTE_PREFIXES)


def check_git_installed() -> None:
    """
    Kiem tra git co trong PATH va chay duoc.

    Goi MOT LAN truoc khi clone, ket qua khong duoc cache o muc module.

    Raises:
        GitNotInstalledError: Neu git khong kha dung
    """
    if shutil.which("git") is None:
        raise GitNotInstalledError(
            "Git is not installed or not in PATH. Please install Git to clone repositories."
        )
    try:
        result = subprocess.run(
            ["git", "--version"], capture_output=True, text=True, timeout=10
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        raise GitNotInstalledError(f"Git is not usable: {e}") from e
    if result.returncode != 0:
        raise GitNotInstalledError(f"Git is not usable: {result.stderr.strip()}")
    logger.debug(f"Using {result.stdout.strip()}")


def _classify_clone_failure(url: str, error_msg: str) -> RepoError:
    lowered = error_msg.lower()
    if "not found" in lowered or "repository not found" in lowered:
        return RepoNotFoundError(f"Repository not found: {url}")
    if "could not read" in lowered:
        return RepoNotFoundError(
            f"Could not access repository (it may be private): {url}"
        )
    return RepoError(f"git clone failed: {error_msg.strip()}")


def clone_repo(
    url: str,
    branch: Optional[str] = None,
    timeout: Optional[int] = None,
) -> tempfile.TemporaryDirectory:
    """
    Shallow clone repository vao mot TemporaryDirectory.

    Caller chiu trach nhiem goi check_git_installed() truoc.

    Args:
        url: Git URL (https, ssh, git@)
        branch: Branch/tag can clone (optional)
        timeout: Timeout cho clone (seconds, default 120)

    Returns:
        TemporaryDirectory chua working tree da clone

    Raises:
        InvalidUrlError: URL khong hop le
        RepoNotFoundError: Repo khong tim thay
        CloneTimeoutError: Clone bi timeout
        RepoError: Loi khac
    """
    if not is_remote_url(url):
        raise InvalidUrlError(f"Not a remote git URL: {url}")

    timeout = timeout or DEFAULT_TIMEOUT
    temp_dir = tempfile.TemporaryDirectory(prefix="gitmelt-")

    cmd = ["git", "clone", "--depth", "1"]
    if branch:
        cmd.extend(["--branch", branch])
    cmd.extend(["--", url, temp_dir.name])

    logger.info(f"Cloning {url} into {temp_dir.name}")
    logger.debug(f"Running: {' '.join(cmd)}")

    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        temp_dir.cleanup()
        raise CloneTimeoutError(f"Clone timed out after {timeout} seconds") from e
    except OSError as e:
        temp_dir.cleanup()
        raise RepoError(f"Failed to execute git clone: {e}") from e

    if result.returncode != 0:
        temp_dir.cleanup()
        raise _classify_clone_failure(url, result.stderr or result.stdout)

    return temp_dir
