import json
from pathlib import Path
from typing import Any


def read_text_safe(path: Path) -> str | None:
    """Read a config file, treating any I/O failure as absence."""
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None


def write_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2, sort_keys=False)
        handle.write("\n")


def is_under(path: Path, root: Path) -> bool:
    try:
        path.resolve().relative_to(root.resolve())
        return True
    except (OSError, ValueError):
        return False


def expand_path(value: str, cwd: Path, home: Path | None = None) -> Path:
    if value == "~" or value.startswith("~/"):
        base = home if home is not None else Path.home()
        return base / value[2:] if value != "~" else base
    path = Path(value)
    if not path.is_absolute():
        path = cwd / path
    return path


def compact_home_path(path: str | Path) -> str:
    text = str(path)
    home = str(Path.home())
    if text == home:
        return "~"
    home_prefix = f"{home}/"
    if text.startswith(home_prefix):
        return f"~/{text[len(home_prefix):]}"
    return text
