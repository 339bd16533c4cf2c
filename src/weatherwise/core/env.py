"""
Project root discovery and `.env` loading.

The provider credential (`NASA_API_KEY`) usually lives in a repo-local `.env`, and the
cache directory is configured as a relative path (`.cache/weatherwise`). Both must
resolve the same way whether the code runs under uvicorn, the CLI or pytest, from any
working directory.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

ROOT_OVERRIDE_ENV = "WEATHERWISE_PROJECT_ROOT"
ENV_FILE_ENV = "WEATHERWISE_ENV_FILE"


def _is_project_root(path: Path) -> bool:
    if (path / ".env").is_file() or (path / ".git").exists():
        return True
    return (path / "pyproject.toml").is_file() and (path / "src" / "weatherwise").is_dir()


def _search_up(start: Path) -> Path | None:
    start = start.resolve()
    for candidate in (start, *start.parents):
        if _is_project_root(candidate):
            return candidate
    return None


@lru_cache
def get_project_root() -> Path:
    """Return the project root (cached).

    Order: `WEATHERWISE_PROJECT_ROOT`, the directory of `WEATHERWISE_ENV_FILE`, the
    nearest marked ancestor of the working directory, then of this module; finally
    the working directory itself.
    """
    override = os.getenv(ROOT_OVERRIDE_ENV)
    if override:
        return Path(override).expanduser().resolve()
    env_file = os.getenv(ENV_FILE_ENV)
    if env_file:
        return Path(env_file).expanduser().resolve().parent
    return _search_up(Path.cwd()) or _search_up(Path(__file__).parent) or Path.cwd().resolve()


@lru_cache
def load_dotenv_if_present() -> Path | None:
    """Load the project's `.env` once; variables already set in the process win."""
    explicit = os.getenv(ENV_FILE_ENV)
    env_path = Path(explicit).expanduser().resolve() if explicit else get_project_root() / ".env"
    if not env_path.is_file():
        return None
    load_dotenv(dotenv_path=env_path, override=False)
    return env_path


def resolve_project_path(path: str | Path) -> Path:
    """Resolve a relative path against the project root; absolute paths pass through."""
    p = Path(path).expanduser()
    return p if p.is_absolute() else (get_project_root() / p).resolve()
