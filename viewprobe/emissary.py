# viewprobe/emissary.py
"""
@file emissary.py
@brief Inspection channel between a test and the framework's lifecycle hook.

The test harness owns an InspectionChannel and hands it to the view under
test. The view's lifecycle hook calls notify(node); the test queues
callbacks with inspect(callback) and waits on the returned expectation.
notify only enqueues, so it is safe to call from the framework's thread;
callbacks run on the waiting thread.
"""

from __future__ import annotations

import logging
import queue
from typing import Any, Callable, List, Optional

from .catalog import Catalog
from .config import InspectConfig
from .exceptions import InspectionError
from .injector import AmbientRegistry
from .tracelogger import TRACE_LOGGER
from .view import InspectableView, inspect
from .waits import wait_until

log = logging.getLogger("viewprobe.emissary")

Callback = Callable[[InspectableView], Any]


class InspectionExpectation:
    """Outcome of one queued inspection."""

    def __init__(self, channel: InspectionChannel, callback: Callback, description: str):
        self.channel = channel
        self.callback = callback
        self.description = description
        self.fulfilled = False
        self.result: Any = None
        self.error: Optional[BaseException] = None

    def run(self, view: InspectableView) -> None:
        try:
            self.result = self.callback(view)
        except Exception as e:
            log.debug("Inspection '%s' failed at %s: %s", self.description, view.path, e)
            self.error = e
        self.fulfilled = True
        TRACE_LOGGER.log(
            event="inspection_run",
            path=view.path,
            status="error" if self.error else "success",
            metadata={"description": self.description},
        )

    def fail(self, error: InspectionError) -> None:
        self.error = error
        self.fulfilled = True

    def wait(self, timeout: Optional[float] = None) -> Any:
        """
        Block until a notification ran this inspection.

        @param timeout Override timeout (inspection_wait default if None)
        @return The callback's return value
        @throws The callback's exception, or TimeoutError if no notification arrived
        """
        config = InspectConfig.current().inspection_wait
        effective_timeout = timeout if timeout is not None else config.timeout

        def done() -> bool:
            self.channel.pump()
            return self.fulfilled

        wait_until(
            done,
            timeout=effective_timeout,
            interval=config.interval,
            description=f"inspection '{self.description}'",
        )
        if self.error is not None:
            raise self.error
        return self.result


class InspectionChannel:
    """
    Message channel: lifecycle notifications in, queued inspections out.
    """

    def __init__(self, registry: Optional[AmbientRegistry] = None, catalog: Optional[Catalog] = None):
        self.registry = registry
        self.catalog = catalog
        self._notices: "queue.Queue[Any]" = queue.Queue()
        self._pending: "queue.Queue[InspectionExpectation]" = queue.Queue()

    def inspect(self, callback: Callback, description: str = "inspection") -> InspectionExpectation:
        """Queue a callback for the next lifecycle notification."""
        expectation = InspectionExpectation(self, callback, description)
        self._pending.put(expectation)
        return expectation

    def notify(self, node: Any) -> None:
        """Framework hook: a lifecycle event happened on node."""
        self._notices.put(node)

    def pump(self) -> int:
        """
        Run queued inspections against queued notifications.

        @return Number of inspections run
        """
        ran = 0
        while True:
            if self._pending.empty():
                return ran
            try:
                node = self._notices.get_nowait()
            except queue.Empty:
                return ran
            batch = self._drain()
            try:
                view = inspect(node, self.registry, self.catalog)
            except InspectionError as e:
                for expectation in batch:
                    expectation.fail(e)
                ran += len(batch)
                continue
            for expectation in batch:
                expectation.run(view)
            ran += len(batch)

    def _drain(self) -> List[InspectionExpectation]:
        batch = []
        while True:
            try:
                batch.append(self._pending.get_nowait())
            except queue.Empty:
                return batch
