"""
Collector Context Version Information

Centralized version management for the collector_context package.
Follow Semantic Versioning 2.0.0 (https://semver.org/)

Version format: MAJOR.MINOR.PATCH
- MAJOR: Incompatible changes to the public context surface
- MINOR: New features in a backwards-compatible manner
- PATCH: Backwards-compatible bug fixes

Version History:
- 1.1.0: Slots classified at registration, opt-in strict mode, YAML config
- 1.0.0: Initial release (thread-bound collector context)
"""

from __future__ import annotations

__version__ = "1.1.0"
__version_info__ = tuple(int(x) for x in __version__.split("."))

# Release metadata
__release_date__ = "2026-10-19"
__release_name__ = "Collector Context"

# Git information (can be populated by CI/CD or build scripts)
__git_sha__ = None
__git_branch__ = None

def get_version() -> str:
    """Get the current version string."""
    return __version__

def get_version_info() -> tuple[int, int, int]:
    """Get version as a tuple of integers (major, minor, patch)."""
    return __version_info__

def get_full_version() -> str:
    """Get full version string including git info if available."""
    version = __version__
    if __git_sha__:
        version += f"+{__git_sha__[:7]}"
    return version

def get_version_dict() -> dict[str, str | tuple[int, int, int] | None]:
    """Get version information as a dictionary."""
    return {
        "version": __version__,
        "version_info": __version_info__,
        "release_date": __release_date__,
        "release_name": __release_name__,
        "git_sha": __git_sha__,
        "git_branch": __git_branch__,
    }
