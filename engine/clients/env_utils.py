"""Settings lookup for provider keys and LINHAS_* switches.

Values come from the process environment first; a local `.env` file only
fills in names the environment leaves unset. The file is read once per
process.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable

_DOTENV_LOADED = False
_QUOTES = ("'", '"')


def _parse_dotenv_line(line: str) -> tuple[str, str] | None:
    """Split one `.env` line into (name, value); None for blanks and comments."""
    text = line.strip()
    if not text or text.startswith("#"):
        return None
    text = text.removeprefix("export ").lstrip()
    name, sep, value = text.partition("=")
    name = name.strip()
    if not sep or not name:
        return None
    value = value.strip()
    if len(value) >= 2 and value[0] in _QUOTES and value[-1] == value[0]:
        value = value[1:-1]
    return name, value


def load_dotenv(path: str | Path = ".env") -> None:
    """Copy unset names from `path` into os.environ, once per process."""
    global _DOTENV_LOADED
    if _DOTENV_LOADED:
        return
    _DOTENV_LOADED = True

    dotenv_path = Path(path)
    if not dotenv_path.is_file():
        return
    with dotenv_path.open(encoding="utf-8") as handle:
        for line in handle:
            entry = _parse_dotenv_line(line)
            if entry is not None:
                os.environ.setdefault(*entry)


def getenv_any(*names: str, default: str | None = None) -> str | None:
    """First non-empty value among `names` (e.g. GEMINI_API_KEY, GOOGLE_API_KEY)."""
    load_dotenv()
    return next((os.environ[name] for name in names if os.environ.get(name)), default)


def require_env_any(*names: str) -> str:
    value = getenv_any(*names)
    if value is None:
        raise ValueError(f"Missing required environment variable. Set one of: {', '.join(names)}")
    return value


def getenv_choice(name: str, choices: Iterable[str], default: str) -> str:
    """Read a case-insensitive switch such as LINHAS_INSIGHT_PROVIDER."""
    allowed = sorted({choice.lower() for choice in choices})
    raw = getenv_any(name) or default
    value = raw.strip().lower()
    if value not in allowed:
        raise ValueError(f"{name}={value!r} is not one of: {', '.join(allowed)}")
    return value
