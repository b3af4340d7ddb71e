"""Host-side lifecycle of one page-text extraction attempt.

Exactly one request can be pending. Each injection gets a fresh sequence
number; the page reply and the timeout timer race, and whichever arrives
first for the *current* sequence number resolves the attempt. Anything
tagged with an older number is dropped.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Optional

from lectern.core.extractor_script import (
    DEFAULT_MAX_CHARS,
    parse_channel_payload,
)
from lectern.core.scheduling import Scheduler, TimerHandle
from lectern.utils.logger import logger

PLACEHOLDER_TEXT = "Couldn't pull text from this page. Try reloading or another site."
DEFAULT_TIMEOUT = 2.5
WORDS_PER_MINUTE = 200


@dataclass(frozen=True)
class ExtractionRequest:
    seq: int
    address: str
    issued_at: float


@dataclass(frozen=True)
class ExtractionResult:
    text: str
    title: str = ""
    address: str = ""

    kind = "result"

    @property
    def word_count(self) -> int:
        trimmed = self.text.strip()
        if not trimmed:
            return 0
        return len(trimmed.split())

    @property
    def reading_minutes(self) -> int:
        return math.ceil(self.word_count / WORDS_PER_MINUTE)


@dataclass(frozen=True)
class Success(ExtractionResult):
    kind = "success"


@dataclass(frozen=True)
class Timeout(ExtractionResult):
    text: str = PLACEHOLDER_TEXT
    kind = "timeout"


@dataclass(frozen=True)
class Empty(ExtractionResult):
    text: str = PLACEHOLDER_TEXT
    kind = "empty"


class ExtractionSessionController:
    """Owns the pending request and the last result for the current page."""

    def __init__(
        self,
        scheduler: Scheduler,
        inject: Callable[[ExtractionRequest], None],
        *,
        timeout: float = DEFAULT_TIMEOUT,
        max_chars: int = DEFAULT_MAX_CHARS,
        on_timer: Optional[Callable[[int], None]] = None,
    ) -> None:
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        if max_chars <= 0:
            raise ValueError("max_chars must be positive")
        self._scheduler = scheduler
        self._inject = inject
        self._timeout = float(timeout)
        self._max_chars = int(max_chars)
        # Timer fires are routed here; the session swaps in its event queue.
        self._on_timer = on_timer or self.on_timeout
        self._seq = 0
        self._pending: Optional[ExtractionRequest] = None
        self._timer: Optional[TimerHandle] = None
        self._deferred: Optional[str] = None
        self._last_result: Optional[ExtractionResult] = None
        self._loading = False
        self._address = ""

    @property
    def pending(self) -> Optional[ExtractionRequest]:
        return self._pending

    @property
    def deferred_address(self) -> Optional[str]:
        return self._deferred

    @property
    def last_result(self) -> Optional[ExtractionResult]:
        return self._last_result

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def is_busy(self) -> bool:
        return self._pending is not None or self._deferred is not None

    def start_extraction(self, address: str) -> Optional[ExtractionRequest]:
        """Issue a new attempt, superseding any pending one.

        While a load is in flight the request is deferred until the load
        finishes; a later deferred request replaces an earlier one.
        """
        self._cancel_pending()
        self._last_result = None
        if self._loading:
            self._deferred = str(address or "")
            logger.debug("Extraction deferred until load finishes: %s", self._deferred)
            return None
        self._deferred = None
        return self._issue(address)

    def on_channel_message(self, payload: object) -> bool:
        """Resolve the pending request from a page message. Returns True if used."""
        request = self._pending
        if request is None:
            logger.debug("Dropping page message with no extraction pending.")
            return False
        message = parse_channel_payload(payload, max_chars=self._max_chars)
        if message.seq is not None and message.seq != request.seq:
            logger.debug(
                "Dropping stale page message seq=%s (pending seq=%s).",
                message.seq,
                request.seq,
            )
            return False
        self._cancel_pending()
        if message.raw:
            logger.info("Page message was not a pageText payload; using it as raw text.")
        if message.text.strip():
            self._last_result = Success(
                text=message.text,
                title=message.title or "Untitled",
                address=request.address,
            )
        else:
            self._last_result = Empty(title=message.title, address=request.address)
        logger.debug(
            "Extraction seq=%s resolved: %s (%d words).",
            request.seq,
            self._last_result.kind,
            self._last_result.word_count,
        )
        return True

    def on_timeout(self, seq: int) -> bool:
        """Resolve as timed out if ``seq`` is still the pending request."""
        request = self._pending
        if request is None or request.seq != seq:
            logger.debug("Ignoring stale extraction timer seq=%s.", seq)
            return False
        self._timer = None
        self._pending = None
        self._last_result = Timeout(address=request.address)
        logger.info(
            "Extraction seq=%s timed out after %.1fs for %s.",
            seq,
            self._timeout,
            request.address,
        )
        return True

    def on_load_started(self, address: str = "") -> None:
        self._loading = True
        if self._pending is not None:
            logger.debug(
                "Load started; dropping extraction seq=%s.", self._pending.seq
            )
            self._cancel_pending()
        if address:
            self.on_address_changed(address)

    def on_load_finished(self, address: str = "") -> None:
        self._loading = False
        if address:
            self.on_address_changed(address)
        if self._deferred is None:
            return
        target = str(address or "") or self._deferred
        self._deferred = None
        logger.debug("Load finished; running deferred extraction for %s.", target)
        self._issue(target)

    def on_address_changed(self, address: str) -> None:
        """Forget the pending attempt and result when the page address changes."""
        value = str(address or "")
        if not value or value == self._address:
            return
        self._address = value
        if self._pending is not None and self._pending.address != value:
            logger.debug(
                "Navigated to %s; dropping extraction seq=%s.",
                value,
                self._pending.seq,
            )
            self._cancel_pending()
        if self._last_result is not None and self._last_result.address != value:
            self._last_result = None

    def cancel(self) -> None:
        """Drop pending and deferred work; keeps the last result."""
        self._cancel_pending()
        self._deferred = None

    def _issue(self, address: str) -> ExtractionRequest:
        self._seq += 1
        value = str(address or "")
        if value:
            self._address = value
        request = ExtractionRequest(
            seq=self._seq, address=value, issued_at=self._scheduler.now()
        )
        self._pending = request
        self._last_result = None
        seq = request.seq
        self._timer = self._scheduler.call_later(
            self._timeout, lambda: self._on_timer(seq)
        )
        logger.debug("Injecting extractor seq=%s into %s.", seq, value)
        try:
            self._inject(request)
        except Exception as exc:
            # The timer still resolves the attempt.
            logger.warning("Extractor injection failed for seq=%s: %s", seq, exc)
        return request

    def _cancel_pending(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._pending = None
