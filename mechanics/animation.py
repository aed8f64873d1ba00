"""Frame-driven tweens and one-shot timers.

Everything here advances only when :meth:`FrameScheduler.tick` is called, so
the owner decides what "now" is (pygame ticks in the app, a fake clock in
tests). Times are milliseconds.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
import time
from typing import Callable, Dict, Hashable, List, Optional, Tuple

log = logging.getLogger("mechanism_workbench.animation")

Clock = Callable[[], float]
TweenKey = Tuple[str, str]


def ease_out_cubic(t: float) -> float:
    t = max(0.0, min(1.0, t))
    return 1.0 - (1.0 - t) ** 3


def interpolate(start: float, target: float, t: float) -> float:
    return start + (target - start) * ease_out_cubic(t)


def default_clock() -> float:
    return time.perf_counter() * 1000.0


@dataclass
class Tween:
    key: TweenKey
    start: float
    target: float
    duration: float
    started_at: float
    apply: Callable[[float], None]
    on_done: Optional[Callable[[], None]] = None
    value: float = field(init=False)

    def __post_init__(self) -> None:
        self.value = self.start

    def progress(self, now: float) -> float:
        if self.duration <= 0:
            return 1.0
        return max(0.0, min(1.0, (now - self.started_at) / self.duration))

    def step(self, now: float) -> bool:
        """Advance to ``now``; returns True once the target is reached."""
        t = self.progress(now)
        self.value = interpolate(self.start, self.target, t)
        self.apply(self.value)
        return t >= 1.0


@dataclass
class TimerHandle:
    due_at: float
    callback: Callable[[], None]
    label: str = ""
    cancelled: bool = False
    fired: bool = False

    def cancel(self) -> None:
        self.cancelled = True


class FrameScheduler:
    """Owns active tweens (one per key) and pending timers."""

    def __init__(self, clock: Optional[Clock] = None) -> None:
        self.clock: Clock = clock or default_clock
        self._tweens: Dict[TweenKey, Tween] = {}
        self._timers: List[TimerHandle] = []

    def now(self) -> float:
        return float(self.clock())

    # --- Tweens ------------------------------------------------------------

    def animate(
        self,
        key: TweenKey,
        start: float,
        target: float,
        duration: float,
        apply: Callable[[float], None],
        *,
        on_done: Optional[Callable[[], None]] = None,
    ) -> Tween:
        """Start (or replace) the tween for ``key``.

        A replaced tween is dropped without running its ``on_done``; the new
        one starts from whatever value the caller passes, normally the
        current interpolated value.
        """
        if key in self._tweens:
            log.debug("Replacing tween %s mid-flight", key)
        tween = Tween(
            key=key,
            start=start,
            target=target,
            duration=duration,
            started_at=self.now(),
            apply=apply,
            on_done=on_done,
        )
        self._tweens[key] = tween
        if tween.step(tween.started_at):
            self._finish(tween)
        return tween

    def cancel_tweens(self, owner: Optional[Hashable] = None) -> int:
        """Drop tweens for one owner id, or every tween when ``owner`` is None."""
        keys = [k for k in self._tweens if owner is None or k[0] == owner]
        for key in keys:
            del self._tweens[key]
        return len(keys)

    def tween_for(self, key: TweenKey) -> Optional[Tween]:
        return self._tweens.get(key)

    @property
    def active_tweens(self) -> int:
        return len(self._tweens)

    # --- Timers ------------------------------------------------------------

    def call_later(self, delay: float, callback: Callable[[], None], *, label: str = "") -> TimerHandle:
        handle = TimerHandle(due_at=self.now() + max(0.0, delay), callback=callback, label=label)
        self._timers.append(handle)
        return handle

    @property
    def pending_timers(self) -> int:
        return sum(1 for t in self._timers if not t.cancelled)

    # --- Frame step --------------------------------------------------------

    def tick(self, now: Optional[float] = None) -> bool:
        """Advance every tween and fire due timers. Returns True if anything ran."""
        now = self.now() if now is None else float(now)
        ran = False
        for tween in list(self._tweens.values()):
            if self._tweens.get(tween.key) is not tween:
                continue
            ran = True
            if tween.step(now):
                self._finish(tween)
        due = [t for t in self._timers if t.due_at <= now]
        if due:
            self._timers = [t for t in self._timers if t.due_at > now]
            for handle in sorted(due, key=lambda h: h.due_at):
                if handle.cancelled:
                    continue
                handle.fired = True
                ran = True
                log.debug("Timer fired: %s", handle.label or handle.callback)
                handle.callback()
        return ran

    def _finish(self, tween: Tween) -> None:
        if self._tweens.get(tween.key) is tween:
            del self._tweens[tween.key]
        if tween.on_done is not None:
            tween.on_done()


__all__ = [
    "Clock",
    "FrameScheduler",
    "TimerHandle",
    "Tween",
    "default_clock",
    "ease_out_cubic",
    "interpolate",
]
