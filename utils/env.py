from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

"""Environment helper utilities.

Loads a `.env` file from the project root so that analysis overrides
(e.g., ``ANALYTICS_N_CLUSTERS``) defined there become available via
``os.getenv``, and reads typed values back out of the environment.
"""

__all__ = ["load_project_dotenv", "env_int", "env_str"]


def _find_project_root(start: Path | None = None) -> Path:
    """Traverse upwards until we find a directory that contains `pyproject.toml`."""
    current = start or Path(__file__).resolve().parent
    for _ in range(10):  # safety break
        if (current / "pyproject.toml").exists():
            return current
        if current.parent == current:
            break
        current = current.parent
    return Path(__file__).resolve().parent


def load_project_dotenv() -> None:
    """Load environment variables from the project-level `.env` if present."""
    project_root = _find_project_root()
    dotenv_path = project_root / ".env"
    if dotenv_path.exists():
        load_dotenv(dotenv_path=dotenv_path, override=False)


def env_str(name: str, default: str | None = None, environ: dict[str, str] | None = None) -> str | None:
    """Return a stripped string variable, or ``default`` when unset or blank."""
    source = os.environ if environ is None else environ
    value = source.get(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def env_int(name: str, default: int, environ: dict[str, str] | None = None) -> int:
    """
    Return an integer variable, or ``default`` when unset.

    Raises:
        ValueError: If the variable is set but is not an integer.
    """
    value = env_str(name, environ=environ)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError as e:
        raise ValueError(f"Environment variable {name} must be an integer, got {value!r}") from e
