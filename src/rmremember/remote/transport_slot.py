"""Capacity-one guards for the tablet's fragile single-session transports."""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Iterator


logger = logging.getLogger(__name__)


class TransportSlot:
    """
    FIFO mutual exclusion for one transport.

    Callers block in arrival order until the slot is theirs; the slot is
    handed to the next ticket when the ``with`` block exits, whatever the
    reason.  A caller interrupted while waiting gives up its ticket so the
    queue keeps moving.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._cond = threading.Condition()
        self._next_ticket = 0
        self._serving = 0
        self._abandoned: set[int] = set()

    @property
    def busy(self) -> bool:
        with self._cond:
            return self._next_ticket != self._serving

    def _advance(self) -> None:
        self._serving += 1
        while self._serving in self._abandoned:
            self._abandoned.discard(self._serving)
            self._serving += 1
        self._cond.notify_all()

    def _acquire(self) -> int:
        with self._cond:
            ticket = self._next_ticket
            self._next_ticket += 1
            try:
                while ticket != self._serving:
                    self._cond.wait()
            except BaseException:
                if ticket == self._serving:
                    self._advance()
                else:
                    self._abandoned.add(ticket)
                raise
            return ticket

    def _release(self) -> None:
        with self._cond:
            self._advance()

    @contextmanager
    def hold(self) -> Iterator[None]:
        ticket = self._acquire()
        logger.debug("%s slot acquired (ticket %d)", self.name, ticket)
        try:
            yield
        finally:
            self._release()
            logger.debug("%s slot released (ticket %d)", self.name, ticket)
