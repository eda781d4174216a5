"""
Normalization stage.

A single asyncio worker that takes events from an inbox queue, fills
their event key and puts them on an outbox queue, in arrival order.

Lifecycle is stream driven:
    RUNNING   events flow
    DRAINING  STREAM_CLOSED seen on the inbox
    CLOSED    STREAM_CLOSED put on the outbox, worker finished
"""

import asyncio
import enum
import logging
import time
from typing import Iterable, List, Optional, Protocol

from prometheus_client import Counter

from normalizer import EventKeyBuilder
from schemas import HttpRequestEvent

logger = logging.getLogger("eventkey.pipeline")


# End-of-stream marker for inbox and outbox queues
STREAM_CLOSED = object()


class StageState(str, enum.Enum):
    RUNNING = "running"
    DRAINING = "draining"
    CLOSED = "closed"


class DurationObserver(Protocol):
    def observe(self, amount: float) -> None:
        ...


class NullObserver:
    def observe(self, amount: float) -> None:
        pass


class NormalizationStage:
    def __init__(
        self,
        builder: EventKeyBuilder,
        observer: Optional[DurationObserver] = None,
        counter: Optional[Counter] = None,
    ):
        self.builder = builder
        self.observer = observer if observer is not None else NullObserver()
        self.counter = counter
        self.state = StageState.RUNNING

    # =========================
    # Per-event work
    # =========================

    def normalize(self, event: HttpRequestEvent) -> HttpRequestEvent:
        if event.event_key:
            logger.debug("skipping event normalization, already has key: %s", event.event_key)
            self._count("skipped")
        else:
            event.event_key = self.builder.build_key(event)
            logger.debug("processed event with key: %s", event.event_key)
            self._count("computed")
        return event

    def _count(self, result: str) -> None:
        if self.counter is not None:
            self.counter.labels(result).inc()

    def _observe_duration(self, start: float) -> None:
        self.observer.observe(time.perf_counter() - start)

    # =========================
    # Stream worker
    # =========================

    async def run(self, inbox: asyncio.Queue, outbox: asyncio.Queue) -> None:
        """
        Consume `inbox` until STREAM_CLOSED, forwarding every event to
        `outbox`, then close `outbox` with STREAM_CLOSED.

        Every event taken from `inbox` is forwarded exactly once. An event
        whose key cannot be built is forwarded unkeyed.
        """
        self.state = StageState.RUNNING
        try:
            while True:
                event = await inbox.get()
                if event is STREAM_CLOSED:
                    inbox.task_done()
                    break
                start = time.perf_counter()
                try:
                    self.normalize(event)
                except Exception:
                    logger.exception(f"failed to build key for {event.method} {event.url!r}, forwarding unkeyed")
                    self._count("failed")
                await outbox.put(event)
                self._observe_duration(start)
                inbox.task_done()
        finally:
            self.state = StageState.DRAINING
            logger.info("input stream closed, finishing")
            await outbox.put(STREAM_CLOSED)
            self.state = StageState.CLOSED

    def start(self, inbox: asyncio.Queue, outbox: asyncio.Queue) -> asyncio.Task:
        return asyncio.create_task(self.run(inbox, outbox), name="normalization-stage")


# =========================
# Helpers
# =========================

async def drain(outbox: asyncio.Queue) -> List[HttpRequestEvent]:
    """Collect events from `outbox` until it is closed."""
    events = []
    while True:
        event = await outbox.get()
        if event is STREAM_CLOSED:
            return events
        events.append(event)


async def run_through(
    stage: NormalizationStage,
    events: Iterable[HttpRequestEvent],
    queue_size: int = 0,
) -> List[HttpRequestEvent]:
    """
    Push `events` through a fresh run of `stage` and return them, in order,
    once the stage has closed its output.
    """
    inbox: asyncio.Queue = asyncio.Queue(maxsize=queue_size)
    outbox: asyncio.Queue = asyncio.Queue(maxsize=queue_size)
    worker = stage.start(inbox, outbox)
    collector = asyncio.create_task(drain(outbox))

    for event in events:
        await inbox.put(event)
    await inbox.put(STREAM_CLOSED)

    result = await collector
    await worker
    return result
