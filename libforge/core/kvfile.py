"""The ``<key>: <value>`` line format shared by the config file and manifests."""

from __future__ import annotations

SEPARATOR = ": "


def parse_line(line: str) -> tuple[str, str] | None:
    """Parse one line, or return ``None`` for blank, comment, or malformed lines.

    The value is everything after the first separator, so values may
    themselves contain ``": "``. A bare ``key:`` yields an empty value.
    """
    line = line.rstrip("\r\n")
    stripped = line.strip()
    if not stripped or stripped.startswith("#"):
        return None
    key, sep, value = line.partition(SEPARATOR)
    if not sep:
        if stripped.endswith(":"):
            return stripped[:-1].strip(), ""
        return None
    key = key.strip()
    if not key:
        return None
    return key, value.strip()


def parse_text(text: str) -> dict[str, str]:
    """Parse a whole file; a repeated key keeps its last value."""
    entries: dict[str, str] = {}
    for line in text.splitlines():
        parsed = parse_line(line)
        if parsed is not None:
            key, value = parsed
            entries.pop(key, None)
            entries[key] = value
    return entries


def render_line(key: str, value: str) -> str:
    return f"{key}{SEPARATOR}{value}\n"
