"""Repeating barcode decode attempts against a live camera stream."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Protocol

from checkin_tracker.domain.scanning import (
    DecodeEngineError,
    Detected,
    FatalError,
    Miss,
    ScanOutcome,
)
from checkin_tracker.services.capture import DeviceHandle

logger = logging.getLogger(__name__)

DetectedCallback = Callable[[str], None]
ErrorCallback = Callable[[DecodeEngineError], None]


class Decoder(Protocol):
    """Barcode decoding engine."""

    async def decode(self, frame: object) -> str | None:
        """Return the decoded text, or None when the frame holds no barcode."""


@dataclass
class DecoderProvider:
    """Loads the decoding engine once and shares it between loops.

    A failed load is not cached, so the next explicit start tries again.
    """

    loader: Callable[[], Awaitable[Decoder]]
    _pending: "asyncio.Future[Decoder] | None" = field(
        default=None, init=False, repr=False
    )

    async def get(self) -> Decoder:
        """Return the decoder, loading it on first use."""
        pending = self._pending
        if pending is None:
            pending = asyncio.ensure_future(self._load())
            self._pending = pending
        try:
            return await asyncio.shield(pending)
        except DecodeEngineError:
            if self._pending is pending:
                self._pending = None
            raise

    async def _load(self) -> Decoder:
        try:
            return await self.loader()
        except DecodeEngineError:
            raise
        except Exception as exc:
            raise DecodeEngineError(f"Decoder failed to load: {exc}") from exc


@dataclass(eq=False)
class LoopHandle:
    """One running decode loop."""

    generation: int
    device: DeviceHandle
    on_detected: DetectedCallback
    on_error: ErrorCallback
    finished: bool = False
    ticker: "asyncio.Task[None] | None" = None
    attempts: "set[asyncio.Task[None]]" = field(default_factory=set)


@dataclass
class FrameDecodeLoop:
    """Schedules decode attempts on a fixed interval.

    At most one result is delivered per loop: the first detection or fatal
    engine error wins and everything after it is dropped.
    """

    decoders: DecoderProvider
    interval_seconds: float = 0.1
    max_in_flight: int = 2
    _generation: int = field(default=0, init=False)
    _current: LoopHandle | None = field(default=None, init=False, repr=False)

    @property
    def generation(self) -> int:
        """Generation of the most recently started loop."""
        return self._generation

    def start_loop(
        self,
        device: DeviceHandle,
        on_detected: DetectedCallback,
        on_error: ErrorCallback,
    ) -> LoopHandle:
        """Start polling the device. Any previous loop is cancelled first."""
        if self._current is not None:
            self.cancel(self._current)
        self._generation += 1
        handle = LoopHandle(
            generation=self._generation,
            device=device,
            on_detected=on_detected,
            on_error=on_error,
        )
        self._current = handle
        handle.ticker = asyncio.get_running_loop().create_task(self._run(handle))
        return handle

    def cancel(self, handle: LoopHandle) -> None:
        """Stop scheduling attempts and drop any result still in flight."""
        handle.finished = True
        if self._current is handle:
            self._current = None
        running = asyncio.current_task()
        tasks = [handle.ticker, *handle.attempts]
        for task in tasks:
            if task is not None and task is not running and not task.done():
                task.cancel()

    async def _run(self, handle: LoopHandle) -> None:
        try:
            decoder = await self.decoders.get()
        except DecodeEngineError as exc:
            logger.warning("Decoder unavailable: %s", exc)
            self._deliver(handle, FatalError(exc))
            return
        while not handle.finished:
            if len(handle.attempts) < self.max_in_flight:
                task = asyncio.create_task(self._attempt(handle, decoder))
                handle.attempts.add(task)
                task.add_done_callback(handle.attempts.discard)
            await asyncio.sleep(self.interval_seconds)

    async def _attempt(self, handle: LoopHandle, decoder: Decoder) -> None:
        outcome = await _decode_once(handle.device, decoder)
        self._deliver(handle, outcome)

    def _deliver(self, handle: LoopHandle, outcome: ScanOutcome) -> None:
        if handle.finished or handle.generation != self._generation:
            if not isinstance(outcome, Miss):
                logger.debug("Dropped result from loop %s", handle.generation)
            return
        if isinstance(outcome, Miss):
            return
        # finish before calling out so re-entrant results are dropped
        self.cancel(handle)
        try:
            if isinstance(outcome, Detected):
                handle.on_detected(outcome.code)
            else:
                handle.on_error(outcome.error)
        except Exception:
            logger.exception(
                "Scan listener failed", extra={"generation": handle.generation}
            )


async def _decode_once(device: DeviceHandle, decoder: Decoder) -> ScanOutcome:
    try:
        frame = await device.read_frame()
    except Exception:
        logger.warning("Frame read failed", exc_info=True)
        return Miss()
    if frame is None:
        return Miss()
    try:
        code = await decoder.decode(frame)
    except DecodeEngineError as exc:
        return FatalError(exc)
    except Exception as exc:
        return FatalError(DecodeEngineError(f"Decoder failed: {exc}"))
    if not code:
        return Miss()
    return Detected(code)
