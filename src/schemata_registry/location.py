"""Resource location resolution.

Turns a configured location string into the base path documents are fetched
from. Local paths are used as-is; GitHub web and raw-content URLs are
normalized to ``https://raw.githubusercontent.com/<owner>/<repo>/<branch>[/<path>]``.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence
from urllib.parse import urlsplit

from .errors import ConfigurationError
from .logging import LogEvent, log_debug

DEFAULT_BRANCH = "master"
GITHUB_HOST = "github.com"
RAW_GITHUB_HOST = "raw.githubusercontent.com"
BRANCH_SPECIFIERS = ("tree", "blob")


@dataclass(frozen=True)
class Location:
    """Resolved base path for one resource family.

    Attributes:
        base_path: Directory or URL prefix, never ending in a slash
        load_from_local_file: True when documents are read from disk
    """

    base_path: str
    load_from_local_file: bool


def sanitize_location_value(value: object) -> Optional[str]:
    """Trim a location value and strip trailing slashes.

    Returns:
        The cleaned value, or None if nothing usable remains
    """
    if not value or not isinstance(value, str):
        return None
    cleaned = value.strip().rstrip("/")
    return cleaned or None


def build_raw_github_url(owner: str, repo: str, branch: str, path_segments: Optional[Sequence[str]] = None) -> str:
    """Build a raw-content URL for a repository path."""
    base = f"https://{RAW_GITHUB_HOST}/{owner}/{repo}/{branch}"
    if not path_segments:
        return base
    return f"{base}/{'/'.join(path_segments)}"


def _path_segments(path: str) -> List[str]:
    return [segment for segment in path.split("/") if segment]


def _fallback_branch(default_branch: Optional[str]) -> str:
    return sanitize_location_value(default_branch) or DEFAULT_BRANCH


def normalize_github_location(url: str, path: str, default_branch: Optional[str] = None) -> str:
    """Normalize a ``github.com`` web URL to a raw-content base URL.

    A path without a ``tree``/``blob`` specifier is taken as a sub-path on the
    fallback branch.
    """
    segments = _path_segments(path)
    if len(segments) < 2:
        return url

    owner, repo, rest = segments[0], segments[1], segments[2:]
    fallback = _fallback_branch(default_branch)

    if not rest:
        return build_raw_github_url(owner, repo, fallback)

    specifier, remaining = rest[0], rest[1:]
    if specifier in BRANCH_SPECIFIERS:
        branch = remaining[0] if remaining else fallback
        return build_raw_github_url(owner, repo, branch, remaining[1:])

    return build_raw_github_url(owner, repo, fallback, rest)


def normalize_raw_github_url(url: str, path: str, default_branch: Optional[str] = None) -> str:
    """Normalize a ``raw.githubusercontent.com`` URL.

    Unlike web URLs, a path without a ``tree``/``blob`` specifier starts with
    the branch name.
    """
    segments = _path_segments(path)
    if len(segments) < 2:
        return url

    owner, repo, rest = segments[0], segments[1], segments[2:]
    fallback = _fallback_branch(default_branch)

    if not rest:
        return build_raw_github_url(owner, repo, fallback)

    specifier, remaining = rest[0], rest[1:]
    if specifier in BRANCH_SPECIFIERS:
        branch = remaining[0] if remaining else fallback
        return build_raw_github_url(owner, repo, branch, remaining[1:])

    return build_raw_github_url(owner, repo, rest[0], rest[1:])


def resolve_resource_location(
    value: Optional[str],
    env_name: str,
    default_branch: Optional[str] = None,
) -> Location:
    """Resolve a configured location string into a :class:`Location`.

    Args:
        value: Local path, GitHub web URL, raw-content URL or any other URL
        env_name: Name of the setting the value came from, used in errors
        default_branch: Branch to use when the URL does not name one

    Returns:
        The resolved location

    Raises:
        ConfigurationError: If the value is missing or empty
    """
    sanitized = sanitize_location_value(value)
    if not sanitized:
        raise ConfigurationError(f"{env_name} environment variable is required.", env_name=env_name)

    if not sanitized.startswith("http"):
        log_debug(LogEvent.LOCATION, "Resolved local resource location", env=env_name, path=sanitized)
        return Location(base_path=sanitized, load_from_local_file=True)

    base_path = sanitized
    try:
        parts = urlsplit(sanitized)
        hostname = parts.hostname
    except ValueError:
        # Unparseable URLs are passed through; fetching will report the problem.
        hostname = None

    if hostname == GITHUB_HOST:
        base_path = normalize_github_location(sanitized, parts.path, default_branch)
    elif hostname == RAW_GITHUB_HOST:
        base_path = normalize_raw_github_url(sanitized, parts.path, default_branch)

    log_debug(LogEvent.LOCATION, "Resolved remote resource location", env=env_name, base_path=base_path)
    return Location(base_path=base_path, load_from_local_file=False)
