"""End-to-end workflow runs against simulated webmail pages"""

import pytest

from readall.browser.snapshot_document import SnapshotDocument
from readall.providers.registry import ProviderRegistry
from readall.workflow.models import WorkflowState, WorkflowTimings
from readall.workflow.orchestrator import LogNotifier, LogTrigger, WorkflowOrchestrator, prepare_provider


NO_PAUSES = WorkflowTimings(select_pause_ms=0, mark_pause_ms=0)


async def run_gmail(document, fast_gmail):
    """Resolve, speed up and run the Gmail provider for document"""
    registry = ProviderRegistry(document)
    provider = await prepare_provider(registry)
    assert provider is not None
    fast_gmail(provider)

    trigger = LogTrigger()
    notifier = LogNotifier()
    orchestrator = WorkflowOrchestrator(provider, trigger=trigger, notifier=notifier, timings=NO_PAUSES)
    result = await orchestrator.run()
    return result, trigger, notifier


class TestGmailScenarios:
    """Full runs on the simulated Gmail inbox"""

    @pytest.mark.asyncio
    async def test_happy_path_with_page_selection(self, gmail_host, fast_gmail, log_records):
        """Checkbox selection, direct mark-as-read, "None" deselect"""
        document, state = gmail_host(scope_items=("All", "None", "Read"))

        result, trigger, notifier = await run_gmail(document, fast_gmail)

        assert result.state == WorkflowState.DONE
        assert state.marked_read is True
        assert state.picked == ["None"]
        assert document.soup.select_one("#master")["aria-checked"] == "false"
        assert notifier.messages == []
        assert trigger.busy is False
        assert not [r for r in log_records if r["level"].name == "ERROR"]

    @pytest.mark.asyncio
    async def test_happy_path_unread_scope(self, gmail_host, fast_gmail):
        """Default scope selects unread through the menu"""
        document, state = gmail_host()

        result, trigger, notifier = await run_gmail(document, fast_gmail)

        assert result.succeeded
        assert state.picked == ["Unread", "None"]
        assert state.marked_read is True

    @pytest.mark.asyncio
    async def test_overflow_menu_and_confirmation(self, gmail_host, fast_gmail):
        """No direct button: mark as read through "More" and accept the dialog"""
        document, state = gmail_host(exclude=("#mark-read", "#hidden-mark-read"), confirm_on_mark=True)

        result, trigger, notifier = await run_gmail(document, fast_gmail)

        assert result.state == WorkflowState.DONE
        assert "Mark as read" in state.picked
        assert state.confirmed == 1
        assert document.soup.select_one("#confirm-dialog") is None

    @pytest.mark.asyncio
    async def test_missing_toolbar_fails_and_resets_trigger(self, gmail_host, fast_gmail):
        """No master checkbox: FAILED, one alert, nothing marked, trigger idle"""
        document, state = gmail_host(exclude=("#master", "#footer-toggle"), scope_items=("All",))

        result, trigger, notifier = await run_gmail(document, fast_gmail)

        assert result.state == WorkflowState.FAILED
        assert len(notifier.messages) == 1
        assert notifier.messages[0].startswith("Read All Failed: ")
        assert "toolbar control" in notifier.messages[0]
        assert state.marked_read is False
        assert trigger.busy is False


class TestUnsupportedPage:
    """Pages no provider claims"""

    @pytest.mark.asyncio
    async def test_unknown_host_is_left_untouched(self, log_records):
        """No provider: one notice, no events, no mutations"""
        document = SnapshotDocument(
            '<div class="toolbar"><div role="checkbox" data-top="10"></div></div>',
            url="https://intranet.example.org/mail",
        )

        provider = await prepare_provider(ProviderRegistry(document))

        assert provider is None
        assert document.events == []
        assert document.mutation_count == 0
        assert sum("No matching provider" in r["message"] for r in log_records) == 1
