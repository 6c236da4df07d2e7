"""Thin wrapper around the GitHub CLI (`gh api`)."""
import subprocess
import tempfile
from typing import List, Optional

DEFAULT_TIMEOUT = 30
BULK_TIMEOUT = 90
MAX_OUTPUT_BYTES = 10 * 1024 * 1024


class GhCommandError(Exception):
    """Raised when a gh command fails."""
    pass


class GhNotInstalledError(GhCommandError):
    """Raised when the gh executable cannot be found."""
    pass


class GhAuthError(GhCommandError):
    """Raised when gh is not authenticated."""
    pass


def _build_api_command(path: str, jq: Optional[str]) -> List[str]:
    cmd = ["gh", "api", path]
    if jq:
        cmd.extend(["--jq", jq])
    return cmd


def run_gh_api(
    path: str,
    jq: Optional[str] = None,
    timeout: int = DEFAULT_TIMEOUT,
    max_output_bytes: Optional[int] = None,
) -> str:
    """Execute a `gh api` call and return its output.

    The command is passed as an argument list, never through a shell.

    Args:
        path: API path with query string (e.g. ``repos/o/r/branches?page=1``)
        jq: Optional jq projection applied by gh to the response
        timeout: Seconds before the call is abandoned
        max_output_bytes: Reject responses larger than this many bytes. When
            set, output is spooled to a temporary file instead of memory.

    Returns:
        Standard output from gh

    Raises:
        GhCommandError: If the call fails, times out or exceeds the output cap
        GhNotInstalledError: If gh is not installed or not found
    """
    cmd = _build_api_command(path, jq)
    try:
        if max_output_bytes is None:
            result = subprocess.run(
                cmd, capture_output=True, text=True, timeout=timeout, check=True
            )
            return result.stdout

        with tempfile.TemporaryFile() as out:
            subprocess.run(
                cmd, stdout=out, stderr=subprocess.PIPE, timeout=timeout, check=True
            )
            size = out.tell()
            if size > max_output_bytes:
                raise GhCommandError(
                    f"gh api output exceeded {max_output_bytes} bytes: {path}"
                )
            out.seek(0)
            return out.read().decode("utf-8", errors="replace")
    except subprocess.CalledProcessError as e:
        stderr = e.stderr
        if isinstance(stderr, bytes):
            stderr = stderr.decode("utf-8", errors="replace")
        error_msg = stderr.strip() if stderr else str(e)
        raise GhCommandError(f"gh api failed: {path}\n{error_msg}") from e
    except subprocess.TimeoutExpired as e:
        raise GhCommandError(f"gh api timed out after {timeout}s: {path}") from e
    except FileNotFoundError:
        raise GhNotInstalledError("GitHub CLI (gh) is not installed or not found in PATH") from None


def check_gh_auth(timeout: int = DEFAULT_TIMEOUT) -> None:
    """Verify that gh is installed and authenticated.

    Raises:
        GhAuthError: If `gh auth status` reports no usable login
        GhNotInstalledError: If gh is not installed or not found
    """
    try:
        subprocess.run(
            ["gh", "auth", "status"],
            capture_output=True,
            text=True,
            timeout=timeout,
            check=True,
        )
    except subprocess.CalledProcessError as e:
        raise GhAuthError("GitHub CLI is not authenticated. Run: gh auth login") from e
    except subprocess.TimeoutExpired as e:
        raise GhAuthError("Timed out checking GitHub CLI authentication") from e
    except FileNotFoundError:
        raise GhNotInstalledError("GitHub CLI (gh) is not installed or not found in PATH") from None


def split_lines(output: str) -> List[str]:
    """Split gh output into non-empty lines."""
    return [line for line in output.splitlines() if line.strip()]
