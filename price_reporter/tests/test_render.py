"""Unit tests for summary rendering."""

import base64
import json

import pytest

from price_reporter.src.ReportPayload import ReportPayload, SubmissionStatus
from price_reporter.src.Reporter import ReportSummary
from price_reporter.src.render import render_summary, render_table, summary_to_dict


def make_summary(status: SubmissionStatus | None = None) -> ReportSummary:
    payload = ReportPayload(
        price=150_000_000, block_height=123, public_key=b"pk", signature=b"sig"
    )
    return ReportSummary(payload=payload, envelope=payload.to_envelope(), status=status)


class TestJson:
    """Test the machine-readable output."""

    def test_committed(self) -> None:
        summary = make_summary(SubmissionStatus("hash1"))
        data = json.loads(render_summary(summary, "json"))
        assert data == {
            "price": 150_000_000,
            "block_height": 123,
            "txn": base64.b64encode(summary.envelope).decode("ascii"),
            "hash": "hash1",
        }

    def test_not_committed(self) -> None:
        assert summary_to_dict(make_summary())["hash"] is None


class TestTable:
    """Test the human-readable output."""

    def test_rows(self) -> None:
        text = render_summary(make_summary(SubmissionStatus("hash1")), "table")
        assert "| Block Height | 123" in text
        assert "| Price        | 1.50000000" in text
        assert "| Hash         | hash1" in text
        assert "--commit" not in text

    def test_commit_hint(self) -> None:
        text = render_summary(make_summary(), "table")
        assert "| Hash         | none" in text
        assert text.endswith("To commit this report, re-run with --commit")

    def test_table_is_aligned(self) -> None:
        lines = render_table([("a", "1"), ("long key", "long value")]).splitlines()
        assert len({len(line) for line in lines}) == 1
        assert lines[1] == "| Key      | Value      |"

    def test_unknown_format(self) -> None:
        with pytest.raises(ValueError):
            render_summary(make_summary(), "yaml")
