"""Single-shot run: delay, login, fetch, snapshot, project, publish, terminate."""

from __future__ import annotations

import asyncio
import json
import logging
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import Any, TypeVar

from pysofar._constants import DONE_REASON
from pysofar._redact import redact_for_log
from pysofar.client import SofarClient
from pysofar.config import SofarConfig
from pysofar.exceptions import SofarConfigError, SofarStoreWriteError
from pysofar.ingestion.projector import ProjectionReport, StationProjector
from pysofar.publisher import MqttPublisher, PublishReport
from pysofar.snapshot import save_snapshot
from pysofar.state.tree import MemoryStateTree, StateTree

_logger = logging.getLogger(__name__)

Terminate = Callable[[str, int], None]
T = TypeVar("T")


class RunState(StrEnum):
    IDLE = "idle"
    DELAYING = "delaying"
    AUTHENTICATING = "authenticating"
    FETCHING = "fetching"
    SNAPSHOTTING = "snapshotting"
    PROJECTING = "projecting"
    PUBLISHING = "publishing"
    TERMINATING = "terminating"


@dataclass
class RunOutcome:
    """Result of one run, as handed to the terminate hook."""

    ok: bool
    reason: str
    code: int = 0
    failed_in: RunState | None = None
    records: list[dict[str, Any]] = field(default_factory=list)
    snapshot: Path | None = None
    projection: ProjectionReport | None = None
    publish: PublishReport | None = None


def exit_process(reason: str, code: int) -> None:
    """Fallback terminate hook for hosts that provide none."""
    _logger.info("Terminating: %s", reason)
    raise SystemExit(code)


def _default_publisher(config: SofarConfig) -> MqttPublisher:
    return MqttPublisher(
        config.broker_address.strip(),
        config.mqtt_port,
        username=config.mqtt_user,
        password=config.mqtt_pass,
    )


def _default_tree(config: SofarConfig) -> StateTree:
    if config.state_file:
        return MemoryStateTree.load(config.state_file)
    return MemoryStateTree()


class RunOrchestrator:
    """Runs one bounded poll and signals termination exactly once.

    Usage::

        outcome = await RunOrchestrator(config, terminate=host.terminate).run()
    """

    def __init__(
        self,
        config: SofarConfig,
        *,
        tree: StateTree | None = None,
        terminate: Terminate | None = None,
        client_factory: Callable[[SofarConfig], SofarClient] = SofarClient,
        publisher_factory: Callable[[SofarConfig], MqttPublisher] = _default_publisher,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        rng: random.Random | None = None,
    ) -> None:
        self._config = config
        self._tree = tree if tree is not None else _default_tree(config)
        self._terminate = terminate if terminate is not None else exit_process
        self._client_factory = client_factory
        self._publisher_factory = publisher_factory
        self._sleep = sleep
        self._rng = rng or random.Random()
        self._state = RunState.IDLE
        self._terminated = False

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def tree(self) -> StateTree:
        return self._tree

    async def run(self) -> RunOutcome:
        """Execute the run.

        Cancelling the task running this coroutine (e.g. on shutdown)
        cancels the startup delay; the bus connection is still closed and
        the terminate hook is still called before the cancellation
        propagates.
        """
        try:
            outcome = await self._execute()
        except asyncio.CancelledError:
            self._finish(RunOutcome(ok=False, reason="Run cancelled", failed_in=self._state))
            raise
        except Exception as exc:
            _logger.exception("Error in the process: %s", exc)
            outcome = RunOutcome(ok=False, reason=f"Error in the process: {exc}", failed_in=self._state)
        self._finish(outcome)
        return outcome

    def _enter(self, state: RunState) -> None:
        _logger.debug("Run state %s -> %s", self._state, state)
        self._state = state

    def _finish(self, outcome: RunOutcome) -> None:
        if self._terminated:
            return
        self._terminated = True
        self._enter(RunState.TERMINATING)
        self._terminate(outcome.reason, outcome.code)

    async def _execute(self) -> RunOutcome:
        config = self._config
        try:
            config.validate()
        except SofarConfigError as exc:
            _logger.error("%s", exc)
            return RunOutcome(ok=False, reason=str(exc), failed_in=RunState.IDLE)

        self._enter(RunState.DELAYING)
        delay = self._rng.randint(0, config.startup_delay_max)
        _logger.debug("Start cloud query after %d seconds...", delay)
        await self._sleep(delay)

        publisher: MqttPublisher | None = None
        try:
            if config.mqtt_enabled:
                publisher = self._publisher_factory(config)
                await self._in_thread(publisher.connect)

            async with self._client_factory(config) as client:
                self._enter(RunState.AUTHENTICATING)
                token = await client.login()
                if token is None:
                    _logger.error("No token received")
                    return RunOutcome(ok=False, reason="No token received", failed_in=RunState.AUTHENTICATING)

                self._enter(RunState.FETCHING)
                records = await client.fetch_all(token)
                if records is None:
                    _logger.error("No data received")
                    return RunOutcome(ok=False, reason="No data received", failed_in=RunState.FETCHING)

            outcome = RunOutcome(ok=True, reason=DONE_REASON, records=records)

            if config.store_json:
                self._enter(RunState.SNAPSHOTTING)
                outcome.snapshot = save_snapshot(records, config.store_dir)

            self._enter(RunState.PROJECTING)
            outcome.projection = StationProjector(self._tree).project_all(records)
            self._persist_tree()

            if _logger.isEnabledFor(logging.DEBUG):
                _logger.debug("%s", json.dumps(redact_for_log(records), indent=2, ensure_ascii=False))

            if publisher is not None:
                self._enter(RunState.PUBLISHING)
                outcome.publish = await self._in_thread(publisher.publish, records)

            _logger.info(
                "Run complete: %d stations, %d values written, %d field failures",
                len(records),
                len(outcome.projection.written),
                len(outcome.projection.failures),
            )
            return outcome
        finally:
            if publisher is not None:
                publisher.disconnect()

    @staticmethod
    async def _in_thread(func: Callable[..., T], *args: Any) -> T:
        """Run a blocking bus call in a worker thread.

        A worker thread cannot be interrupted, so on cancellation the call
        is awaited to completion before the cancellation propagates. The
        caller's cleanup then sees the client the call may have created.
        """
        pending = asyncio.ensure_future(asyncio.to_thread(func, *args))
        try:
            return await asyncio.shield(pending)
        except asyncio.CancelledError:
            _logger.debug("Run cancelled during %s, waiting for the bus call to finish", func.__name__)
            await pending
            raise

    def _persist_tree(self) -> None:
        if not self._config.state_file or not isinstance(self._tree, MemoryStateTree):
            return
        try:
            self._tree.save(self._config.state_file)
        except SofarStoreWriteError as exc:
            _logger.error("%s", exc)
