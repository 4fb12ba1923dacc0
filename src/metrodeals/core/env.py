"""
Project-root lookup and `.env` loading.

Catalog paths in settings are relative (`data/catalogs/...`). The project root is the
closest directory holding `data/catalogs`, searched from the working directory first
and from this package second, so the API, the CLI and the tests agree on it.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

CATALOG_DIR = Path("data") / "catalogs"


def find_project_root(start: Path) -> Path | None:
    """Closest directory at or above `start` that contains `data/catalogs`."""
    start = start.resolve()
    for candidate in (start, *start.parents):
        if (candidate / CATALOG_DIR).is_dir():
            return candidate
    return None


@lru_cache
def get_project_root() -> Path:
    root = find_project_root(Path.cwd()) or find_project_root(Path(__file__).parent)
    return root or Path.cwd().resolve()


@lru_cache
def load_dotenv_if_present() -> Path | None:
    """Load `<root>/.env` once; variables already in the environment win."""
    env_path = get_project_root() / ".env"
    if not env_path.is_file():
        return None
    load_dotenv(dotenv_path=env_path, override=False)
    return env_path


def resolve_project_path(path: str | Path) -> Path:
    p = Path(path).expanduser()
    if p.is_absolute():
        return p
    return (get_project_root() / p).resolve()
