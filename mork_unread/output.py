"""Text rendering of results and of the effective settings."""

from __future__ import annotations

import json
from pathlib import Path

from .config import Settings
from .models import AggregateResult


def render_locations(result: AggregateResult, settings: Settings) -> list[str]:
    """One ``COUNT PATH`` line per mailbox, in input order.

    Entries with an error and no usable count render as ``- PATH (error)``.
    """
    lines: list[str] = []
    for entry in result.entries:
        shown = entry.path if entry.path is not None else entry.spec
        if not entry.summary.available:
            reason = entry.error or "summary unavailable"
            lines.append(f"- {shown} ({reason})")
            continue
        count = entry.summary.unread_messages
        if settings.no_zero and count == 0:
            continue
        lines.append(f"{count} {shown}")
    return lines


def render_total(result: AggregateResult, settings: Settings) -> str:
    total = result.total_unread
    count = "" if settings.no_zero and total == 0 else str(total)
    text = f"{settings.before}{count}{settings.after}"
    return text.strip() if settings.trim else text


def render_report(result: AggregateResult, settings: Settings) -> str:
    """Full stdout text for a run, including the final newline unless disabled."""
    lines = render_locations(result, settings) if settings.location else []
    lines.append(render_total(result, settings))
    text = "\n".join(lines)
    return text if settings.no_newline else text + "\n"


def _toml_value(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Path):
        return json.dumps(str(value))
    if isinstance(value, (list, tuple)):
        items = [_toml_value(v) for v in value]
        if len(items) <= 1:
            return f"[{''.join(items)}]"
        return "[\n" + "".join(f"    {item},\n" for item in items) + "]"
    return json.dumps(value)


def render_settings(settings: Settings, profile: Path | None = None) -> str:
    """Settings as TOML, loadable again as an options file.

    ``profile`` fills in the located default profile when none was set.
    """
    data = settings.model_dump()
    if data["profile"] is None:
        data["profile"] = profile
    lines = [f"{key} = {_toml_value(value)}" for key, value in data.items() if value is not None]
    return "\n".join(lines)
