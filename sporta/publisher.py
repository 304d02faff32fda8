"""Simulated live-score feed.

`LiveUpdatePublisher` owns its own subscription registry and emits at most
one `DeltaEvent` per tick for a match picked at random from a fixed pool of
live ids. Two triggers are evaluated on every tick:

- time: every `minute_every`-th tick advances the clock by one minute;
- goal: with probability `goal_probability` one side scores.

If both fire the event carries both; if neither fires nothing is emitted.

`tick()` is the whole simulation step and can be called directly to advance
virtual time. `start()` hands it to an APScheduler `AsyncIOScheduler` so the
job runs on the event loop thread, never concurrently with itself.
"""
from __future__ import annotations

import itertools
import logging
import random
from typing import Callable, Dict, Iterable, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from sporta.config import DEFAULT_LIVE_MATCH_IDS
from sporta.models import DeltaEvent

logger = logging.getLogger(__name__)

Listener = Callable[[DeltaEvent], None]

_JOB_ID = "sporta-live-feed"


class Subscription:
    """Handle returned by `LiveUpdatePublisher.subscribe`."""

    def __init__(self, publisher: "LiveUpdatePublisher", token: int, listener: Listener) -> None:
        self._publisher = publisher
        self.token = token
        self.listener = listener

    @property
    def active(self) -> bool:
        return self._publisher._is_registered(self.token)

    def unsubscribe(self) -> None:
        """Stop delivery to this listener. Safe to call more than once."""
        self._publisher._remove(self.token)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info) -> None:
        self.unsubscribe()


class LiveUpdatePublisher:
    def __init__(
        self,
        match_ids: Iterable[str] = DEFAULT_LIVE_MATCH_IDS,
        interval: float = 5.0,
        minute_every: int = 6,
        goal_probability: float = 0.05,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.match_ids = tuple(match_ids)
        if not self.match_ids:
            raise ValueError("publisher needs at least one live match id")
        if minute_every < 1:
            raise ValueError("minute_every must be >= 1")
        self.interval = interval
        self.minute_every = minute_every
        self.goal_probability = goal_probability
        self._rng = rng or random.Random()
        self._ticks = 0
        self._tokens = itertools.count(1)
        self._listeners: Dict[int, Listener] = {}
        self._scheduler: Optional[AsyncIOScheduler] = None
        self._owns_scheduler = False

    # -- subscriptions ---------------------------------------------------
    def subscribe(self, listener: Listener) -> Subscription:
        token = next(self._tokens)
        self._listeners[token] = listener
        return Subscription(self, token, listener)

    def _remove(self, token: int) -> None:
        self._listeners.pop(token, None)

    def _is_registered(self, token: int) -> bool:
        return token in self._listeners

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    @property
    def ticks(self) -> int:
        return self._ticks

    # -- simulation ------------------------------------------------------
    def _next_event(self) -> Optional[DeltaEvent]:
        match_id = self._rng.choice(self.match_ids)
        is_goal = self._rng.random() < self.goal_probability
        is_time = self._ticks % self.minute_every == 0
        if not (is_goal or is_time):
            return None

        side = None
        if is_goal:
            side = "A" if self._rng.random() < 0.5 else "B"
        return DeltaEvent(
            id=match_id,
            minute_increment=1 if is_time else None,
            score_a_increment=1 if side == "A" else None,
            score_b_increment=1 if side == "B" else None,
            last_event=f"GOAL! Team {side} Scores" if side else None,
        )

    def tick(self) -> Optional[DeltaEvent]:
        """Advance one tick and deliver the resulting event, if any."""
        self._ticks += 1
        event = self._next_event()
        if event is not None:
            self.publish(event)
        return event

    async def _scheduled_tick(self) -> None:
        # Coroutine jobs run on the loop; plain callables would go to a thread pool.
        self.tick()

    def publish(self, event: DeltaEvent) -> None:
        """Deliver `event` to every registered listener, in registration order."""
        for token, listener in list(self._listeners.items()):
            # An earlier listener may have unsubscribed this one.
            if token not in self._listeners:
                continue
            try:
                listener(event)
            except Exception:
                logger.exception("live update listener %s failed on %s", token, event.id)

    # -- scheduling ------------------------------------------------------
    @property
    def running(self) -> bool:
        return self._scheduler is not None

    def start(self, scheduler: Optional[AsyncIOScheduler] = None) -> None:
        """Schedule `tick` every `interval` seconds.

        Must be called from a running event loop when no scheduler is given.
        """
        if self._scheduler is not None:
            return
        self._owns_scheduler = scheduler is None
        self._scheduler = scheduler or AsyncIOScheduler()
        self._scheduler.add_job(
            self._scheduled_tick,
            trigger=IntervalTrigger(seconds=self.interval),
            id=_JOB_ID,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        if self._owns_scheduler:
            self._scheduler.start()
        logger.info("live feed started (every %ss for %s)", self.interval, ", ".join(self.match_ids))

    def stop(self) -> None:
        if self._scheduler is None:
            return
        if self._owns_scheduler:
            self._scheduler.shutdown(wait=False)
        else:
            self._scheduler.remove_job(_JOB_ID)
        self._scheduler = None
        logger.info("live feed stopped after %d ticks", self._ticks)
