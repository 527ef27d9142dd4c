import time
from dataclasses import dataclass
from typing import Callable, Dict, Hashable, Optional


@dataclass(eq=False)
class GracePeriod:
    identifier: str
    connection: Hashable
    partner: Hashable
    deadline: float

    def remaining(self, now: Optional[float] = None) -> float:
        now = time.time() if now is None else now
        return max(0.0, self.deadline - now)


class GracePeriodManager:
    """Tracks pending grace periods, at most one per identifier.

    Timers are never cancelled. A timer that fires must ``claim`` its grace
    period first; the claim only succeeds for the record that is still
    pending, so a superseded or resolved timer has no effect.
    """

    def __init__(self, duration_sec: float = 10.0, clock: Callable[[], float] = time.time):
        self.duration_sec = float(duration_sec)
        self._clock = clock
        self._pending: Dict[str, GracePeriod] = {}

    def __len__(self) -> int:
        return len(self._pending)

    def now(self) -> float:
        return self._clock()

    def start(self, identifier: str, connection: Hashable, partner: Hashable) -> GracePeriod:
        now = self._clock()
        grace = GracePeriod(
            identifier=identifier,
            connection=connection,
            partner=partner,
            deadline=now + self.duration_sec,
        )
        self._pending[identifier] = grace
        return grace

    def is_pending(self, identifier: Optional[str]) -> bool:
        return identifier is not None and identifier in self._pending

    def get(self, identifier: str) -> Optional[GracePeriod]:
        return self._pending.get(identifier)

    def resolve(self, identifier: str) -> Optional[GracePeriod]:
        return self._pending.pop(identifier, None)

    def claim(self, grace: GracePeriod) -> bool:
        if self._pending.get(grace.identifier) is not grace:
            return False
        del self._pending[grace.identifier]
        return True
