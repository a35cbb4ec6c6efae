"""Unit tests for the read-only probe report"""

import pytest

from readall.browser.snapshot_document import SnapshotDocument
from readall.diagnostics import probe_document


class TestProbeDocument:
    """Test the heuristics report"""

    @pytest.mark.asyncio
    async def test_gmail_snapshot_report(self, load_snapshot):
        """Provider, readiness, master checkbox and control counts are reported"""
        document = load_snapshot("gmail_inbox.html", "https://mail.google.com/mail/u/0/#inbox")

        report = await probe_document(document)

        assert report["provider"] == "Gmail"
        assert report["ready"] is True
        assert report["checkbox_candidates"] > 1
        assert report["master_checkbox"] is not None
        assert report["master_checkbox"]["top"] == 64
        assert set(report["controls"]) == {"mark_as_read", "more_menu", "bulk_select_link"}
        assert sum(report["controls"]["mark_as_read"].values()) >= 1

    @pytest.mark.asyncio
    async def test_probe_does_not_touch_document(self, load_snapshot):
        """Probing dispatches no events and changes nothing"""
        document = load_snapshot("outlook_inbox.html", "https://outlook.live.com/mail/0/")

        report = await probe_document(document)

        assert report["provider"] == "Outlook"
        assert document.events == []
        assert document.mutation_count == 0

    @pytest.mark.asyncio
    async def test_unknown_page(self):
        """No provider leaves the rest of the report empty"""
        document = SnapshotDocument('<div role="checkbox"></div>', url="https://example.com/")

        report = await probe_document(document)

        assert report["provider"] is None
        assert report["ready"] is False
        assert report["checkbox_candidates"] == 1
        assert report["master_checkbox"] is None
        assert report["controls"] == {}
