"""Workflow orchestration: select -> pause -> mark read -> pause -> deselect

The orchestrator is the only place where provider errors are surfaced to the
user. Whatever happens, the trigger control is returned to its idle state.
"""

import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from loguru import logger

from readall.browser.dom import pause
from readall.providers.base import BaseProvider
from readall.providers.registry import ProviderRegistry
from readall.workflow.models import WorkflowResult, WorkflowState, WorkflowTimings


class TriggerControl(ABC):
    """The control that starts a run and shows whether one is in progress"""

    @abstractmethod
    def set_busy(self, busy: bool) -> None:
        """Switch between the busy (disabled) and idle representation"""


class Notifier(ABC):
    """User-facing sink for failure notices"""

    @abstractmethod
    def alert(self, message: str) -> None:
        """Show message to the user"""


class LogTrigger(TriggerControl):
    """Trigger whose busy/idle state is only reported through the log"""

    def __init__(self):
        self.busy = False

    def set_busy(self, busy: bool) -> None:
        self.busy = busy
        logger.debug(f"Trigger {'busy' if busy else 'idle'}")


class LogNotifier(Notifier):
    """Notifier that reports alerts through the log"""

    def __init__(self):
        self.messages: List[str] = []

    def alert(self, message: str) -> None:
        self.messages.append(message)
        logger.error(message)


class WorkflowOrchestrator:
    """Drives one provider through the three-step read-all workflow"""

    def __init__(
        self,
        provider: BaseProvider,
        trigger: Optional[TriggerControl] = None,
        notifier: Optional[Notifier] = None,
        timings: Optional[WorkflowTimings] = None,
        correlation_id: Optional[str] = None
    ):
        """
        Args:
            provider: Provider resolved for the current page
            trigger: Control to mark busy while a run is in flight
            notifier: Sink for user-facing failure notices
            timings: Inter-phase pauses
            correlation_id: ID used to tag log lines (generated if omitted)
        """
        self.provider = provider
        self.trigger = trigger or LogTrigger()
        self.notifier = notifier or LogNotifier()
        self.timings = timings or WorkflowTimings()
        self.correlation_id = correlation_id or uuid.uuid4().hex[:8]
        self.state = WorkflowState.IDLE
        self.transitions: List[WorkflowState] = [WorkflowState.IDLE]
        self._running = False

    def _enter(self, state: WorkflowState):
        self.state = state
        self.transitions.append(state)
        logger.debug(f"[{self.correlation_id}] -> {state.value}")

    @property
    def running(self) -> bool:
        return self._running

    async def run(self) -> WorkflowResult:
        """
        Run select -> mark read -> deselect once.

        A trigger while a run is in flight is refused without touching the page.

        Returns:
            WorkflowResult with the final state (DONE or FAILED)
        """
        result = WorkflowResult(provider=self.provider.name, correlation_id=self.correlation_id)

        if self.running:
            logger.warning(f"[{self.correlation_id}] Run already in progress, ignoring trigger")
            result.state = self.state
            result.error = "A run is already in progress"
            return result

        self._running = True
        self.trigger.set_busy(True)
        self.transitions = [WorkflowState.IDLE]

        try:
            self._enter(WorkflowState.SELECTING)
            logger.info(f"[{self.correlation_id}] Selecting all...")
            await self.provider.select_all()
            result.phases_completed.append("select")

            self._enter(WorkflowState.PAUSING_AFTER_SELECT)
            await pause(self.timings.select_pause_ms)

            self._enter(WorkflowState.MARKING_READ)
            logger.info(f"[{self.correlation_id}] Marking as read...")
            await self.provider.mark_as_read()
            result.phases_completed.append("mark_as_read")

            self._enter(WorkflowState.PAUSING_AFTER_MARK)
            await pause(self.timings.mark_pause_ms)

            self._enter(WorkflowState.DESELECTING)
            logger.info(f"[{self.correlation_id}] Deselecting all...")
            await self.provider.deselect_all()
            result.phases_completed.append("deselect")

            self._enter(WorkflowState.DONE)
            logger.success(f"[{self.correlation_id}] Done!")

        except Exception as e:
            failed_in = self.state
            self._enter(WorkflowState.FAILED)
            message = str(e) or "Unknown error"
            result.error = message
            logger.error(f"[{self.correlation_id}] Error while {failed_in.value}: {e}")
            self.notifier.alert(f"Read All Failed: {message}")

        finally:
            result.state = self.state
            result.finished_at = datetime.now()
            self._running = False
            self.trigger.set_busy(False)

        return result


async def prepare_provider(
    registry: ProviderRegistry,
    location: Optional[str] = None
) -> Optional[BaseProvider]:
    """
    Resolve the provider for the page and wait for its message list.

    Args:
        registry: Registry to resolve against
        location: Page URL (defaults to the registry document's location)

    Returns:
        The ready provider, or None when no provider matches or it never
        became ready. Neither case raises.
    """
    provider = registry.resolve(location)
    if provider is None:
        logger.info("No matching provider found for this page.")
        return None

    logger.info(f"Initializing for {provider.name}...")

    try:
        ready = await provider.is_ready()
    except Exception as e:
        logger.error(f"Error during initialization: {e}")
        return None

    if not ready:
        logger.info(f"Timeout waiting for {provider.name} to be ready.")
        return None

    return provider
