"""Rendering of report summaries as a table or as JSON."""

from __future__ import annotations

import base64
import json
from typing import Any

from .Reporter import ReportSummary

OUTPUT_FORMATS = ("table", "json")


def summary_to_dict(summary: ReportSummary) -> dict[str, Any]:
    """Machine-readable summary.

    ``price`` is in chain units, ``txn`` is the base64 envelope and ``hash``
    is None when the report was not committed.
    """
    return {
        "price": summary.payload.price,
        "block_height": summary.block_height,
        "txn": base64.b64encode(summary.envelope).decode("ascii"),
        "hash": summary.status.hash if summary.status else None,
    }


def summary_rows(summary: ReportSummary) -> list[tuple[str, str]]:
    """Key/value rows for the table view."""
    return [
        ("Block Height", str(summary.block_height)),
        ("Price", str(summary.price)),
        ("Hash", summary.status.hash if summary.status else "none"),
    ]


def render_table(rows: list[tuple[str, str]]) -> str:
    """Render key/value rows as a boxed two-column table."""
    rows = [("Key", "Value"), *rows]
    key_width = max(len(key) for key, _ in rows)
    value_width = max(len(value) for _, value in rows)
    border = f"+-{'-' * key_width}-+-{'-' * value_width}-+"

    lines = [border]
    for index, (key, value) in enumerate(rows):
        lines.append(f"| {key:<{key_width}} | {value:<{value_width}} |")
        if index == 0:
            lines.append(border)
    lines.append(border)
    return "\n".join(lines)


def render_summary(summary: ReportSummary, output_format: str = "table") -> str:
    """Render a summary in the requested format.

    :param summary: Report summary.
    :param output_format: "table" or "json".
    :returns: Rendered text.
    :raises ValueError: If the format is unknown.
    """
    if output_format == "json":
        return json.dumps(summary_to_dict(summary), indent=2)
    if output_format == "table":
        text = render_table(summary_rows(summary))
        if summary.status is None:
            text += "\nTo commit this report, re-run with --commit"
        return text
    raise ValueError(f"Unknown output format: {output_format}")
