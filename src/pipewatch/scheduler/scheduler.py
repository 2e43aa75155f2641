"""PollScheduler - Drives poll cycles on a fixed interval."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from pipewatch.gitlab import GitLabClient
from pipewatch.scheduler.models import SchedulerState, SchedulerStatus

if TYPE_CHECKING:
    from pipewatch.api.events import EventManager
    from pipewatch.config import MonitorSettings
    from pipewatch.monitor import CycleResult, PipelineMonitor

logger = logging.getLogger(__name__)


class PollScheduler:
    """Runs PipelineMonitor cycles on a timer and on demand.

    At most one cycle is in flight at any time; the timer and the manual
    trigger share the same busy check. Stopping never interrupts a running
    cycle, it only prevents the next one.
    """

    def __init__(
        self,
        monitor: PipelineMonitor,
        settings: MonitorSettings,
        event_manager: EventManager | None = None,
    ) -> None:
        """Initialize the scheduler.

        Args:
            monitor: Monitor that runs the cycles and owns their state.
            settings: Initial settings (credentials, interval, notification toggles).
            event_manager: Optional EventManager notified after each cycle.
        """
        self.monitor = monitor
        self.settings = settings
        self.event_manager = event_manager
        self._client: GitLabClient | None = None
        self._retired_clients: list[GitLabClient] = []
        self._loop_task: asyncio.Task[None] | None = None
        self._stop_event: asyncio.Event | None = None
        self._trigger_task: asyncio.Task[CycleResult | None] | None = None
        self._cycle_in_flight = False
        self._idle = asyncio.Event()
        self._idle.set()
        self._state = SchedulerState.STOPPED

    @property
    def is_running(self) -> bool:
        return self._loop_task is not None

    @property
    def is_polling(self) -> bool:
        return self._cycle_in_flight

    def get_status(self) -> SchedulerStatus:
        return SchedulerStatus(
            state=self._state,
            polling=self._cycle_in_flight,
            interval=self.settings.effective_interval,
        )

    def update_settings(self, settings: MonitorSettings) -> None:
        """Replace the settings.

        Notification toggles apply from the next cycle. Credentials and the
        interval apply on the next start()/restart().
        """
        self.settings = settings

    async def start(self) -> bool:
        """Build a client from the current credentials and start the timer.

        Returns:
            True if the timer is running, False if credentials are missing.
        """
        if self._loop_task is not None:
            return True

        if not self.settings.is_configured:
            logger.warning("GitLab credentials missing, not starting the monitor")
            self._state = SchedulerState.NOT_CONFIGURED
            self.monitor.mark_not_configured()
            return False

        self._client = GitLabClient(base_url=self.settings.base_url, token=self.settings.token)
        self._stop_event = asyncio.Event()
        self._loop_task = asyncio.create_task(self._run_loop(self._stop_event))
        self._state = SchedulerState.RUNNING
        logger.info(
            "Monitor started for %s (interval=%.0fs)",
            self.settings.base_url,
            self.settings.effective_interval,
        )
        return True

    async def stop(self) -> None:
        """Stop the timer. The last published snapshot is kept."""
        if self._stop_event is not None:
            self._stop_event.set()
        self._stop_event = None
        self._loop_task = None
        self._state = SchedulerState.STOPPED
        await self._release_client()
        logger.info("Monitor stopped")

    async def restart(self) -> bool:
        """Stop, forget all cross-cycle state, and start with fresh credentials."""
        await self.stop()
        self.monitor.reset()
        return await self.start()

    async def shutdown(self) -> None:
        """Stop and wait for the timer loop and any manual cycle to finish."""
        loop_task = self._loop_task
        trigger_task = self._trigger_task
        await self.stop()
        for task in (loop_task, trigger_task):
            if task is not None and not task.done():
                await task
        await self._close_retired_clients()

    def trigger(self) -> bool:
        """Launch one cycle in the background, outside the timer cadence.

        Returns:
            False if a cycle is already in flight, True otherwise.
        """
        if self._cycle_in_flight:
            logger.info("Poll already in progress, manual trigger skipped")
            return False
        self._trigger_task = asyncio.create_task(self.poll_now())
        return True

    async def poll_now(self) -> CycleResult | None:
        """Run one cycle now.

        Returns:
            The cycle result, or None if no cycle ran (busy, stopped or not
            configured). A stopped monitor keeps its last snapshot.
        """
        if self._cycle_in_flight:
            logger.debug("Poll already in progress, skipping")
            return None

        client = self._client
        if client is None:
            if not self.settings.is_configured:
                self.monitor.mark_not_configured()
            else:
                logger.info("Monitor is stopped, poll skipped")
            return None

        self._cycle_in_flight = True
        self._idle.clear()
        result: CycleResult | None = None
        try:
            result = await self.monitor.poll(client, self.settings)
        except Exception as e:
            logger.exception("Poll cycle crashed: %s", e)
            self.monitor.mark_disconnected(str(e) or type(e).__name__)
        finally:
            self._cycle_in_flight = False
            self._idle.set()
            await self._close_retired_clients()

        self._emit_poll_completed()
        return result

    async def _run_loop(self, stop_event: asyncio.Event) -> None:
        interval = self.settings.effective_interval
        # A cycle left over from before a restart must not swallow the first tick.
        await self._idle.wait()
        while not stop_event.is_set():
            await self.poll_now()
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=interval)
            except TimeoutError:
                continue

    async def _release_client(self) -> None:
        """Detach the current client, closing it once no cycle is using it."""
        client, self._client = self._client, None
        if client is None:
            return
        if self._cycle_in_flight:
            self._retired_clients.append(client)
        else:
            await client.aclose()

    async def _close_retired_clients(self) -> None:
        while self._retired_clients:
            client = self._retired_clients.pop()
            await client.aclose()

    def _emit_poll_completed(self) -> None:
        if self.event_manager is None:
            return
        snapshot = self.monitor.snapshot
        self.event_manager.emit_poll_completed(
            connected=snapshot.is_connected,
            pipeline_count=len(snapshot.pipelines),
            error=snapshot.last_error,
        )
