from __future__ import annotations

import os
from pathlib import Path

DEFAULT_ENV_FILE = Path(__file__).resolve().parent / ".env"


def parse_env_line(raw: str) -> tuple[str, str] | None:
    """'export KEY="value"  # note' -> ('KEY', 'value'). Blank, comment and malformed lines give None."""
    line = raw.strip()
    if line.startswith("export "):
        line = line[len("export "):].lstrip()
    if not line or line.startswith("#") or "=" not in line:
        return None

    key, value = (part.strip() for part in line.split("=", 1))
    if not key:
        return None
    if value[:1] in ("'", '"') and value.count(value[0]) >= 2:
        # quoted: keep everything up to the closing quote, '#' included
        value = value[1:value.index(value[0], 1)]
    elif " #" in value:
        value = value.split(" #", 1)[0].rstrip()
    return key, value


def load_env(path: Path | str | None = None) -> dict[str, str]:
    """Copy KEY=VALUE pairs from a .env file into os.environ.

    Variables that are already set win. Returns the pairs that were applied.
    """
    env_path = Path(path) if path else DEFAULT_ENV_FILE
    if not env_path.is_file():
        return {}

    applied: dict[str, str] = {}
    for raw in env_path.read_text(encoding="utf-8").splitlines():
        pair = parse_env_line(raw)
        if pair is None:
            continue
        key, value = pair
        if key in os.environ:
            continue
        os.environ[key] = value
        applied[key] = value
    return applied
