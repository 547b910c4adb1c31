"""Session-scoped cache over one feed fetch.

The cache moves through ``loading`` -> ``ready`` or ``error``. ``load`` fetches
at most once per session; ``retry`` runs the transport and the whole pipeline
again and replaces the previous result. Concurrent callers are not
deduplicated: whichever run finishes last owns the slot, so callers should not
retry while the status is ``loading``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from feed311.common.constants import MAX_RESULTS
from feed311.common.errors import DecodeError, TransportError
from feed311.common.logging import log_event
from feed311.pipeline.normalise import NormalisedFeed, run_normalise
from feed311.session.transport import FeedTransport

STATUS_LOADING = "loading"
STATUS_ERROR = "error"
STATUS_READY = "ready"


@dataclass(frozen=True)
class FeedState:
    status: str
    feed: NormalisedFeed | None = None
    error_message: str | None = None
    error_code: str | None = None

    @property
    def records(self) -> tuple:
        if self.feed is None:
            return ()
        return self.feed.records


FeedListener = Callable[[FeedState], None]


class FeedCache:
    def __init__(
        self,
        transport: FeedTransport,
        *,
        max_results: int = MAX_RESULTS,
        logger: logging.Logger | None = None,
    ) -> None:
        self.transport = transport
        self.max_results = max_results
        self.logger = logger or logging.getLogger(__name__)
        self._state = FeedState(status=STATUS_LOADING)
        self._started = False
        self._listeners: list[FeedListener] = []

    @property
    def state(self) -> FeedState:
        return self._state

    def subscribe(self, listener: FeedListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _transition(self, state: FeedState) -> FeedState:
        self._state = state
        for listener in list(self._listeners):
            listener(state)
        return state

    def load(self) -> FeedState:
        if self._started:
            return self._state
        return self._run()

    def retry(self) -> FeedState:
        return self._run()

    def _run(self) -> FeedState:
        self._started = True
        source = getattr(self.transport, "source", None)
        self._transition(FeedState(status=STATUS_LOADING))
        log_event(self.logger, "feed fetch start", stage="fetch", source=source, event="FETCH_START", status="ok")

        try:
            text = self.transport.fetch_text()
            feed = run_normalise(text, max_results=self.max_results, logger=self.logger)
        except (TransportError, DecodeError) as exc:
            log_event(
                self.logger,
                str(exc),
                level=logging.ERROR,
                stage="fetch",
                source=source,
                event="FETCH_FAIL",
                status="error",
                error_code=exc.error_code,
            )
            return self._transition(FeedState(status=STATUS_ERROR, error_message=str(exc), error_code=exc.error_code))

        log_event(
            self.logger,
            "feed fetch complete",
            stage="fetch",
            source=source,
            event="FETCH_OK",
            status="ok",
            rows_in=feed.rows_in,
            rows_out=feed.rows_out,
        )
        return self._transition(FeedState(status=STATUS_READY, feed=feed))
