from typing import Dict, Set

from ...errors import StaleRender


class RenderGenerations:
    """
    Per-target render generation counters.

    Each request for a target (main canvas, a thumbnail) takes the next
    generation number. When the rasterization finishes, its result is
    only used if no newer request was made for that target meanwhile.
    In-flight work is never cancelled, only ignored.
    """

    def __init__(self):
        self._current: Dict[str, int] = {}
        self._in_flight: Set[str] = set()

    def advance(self, target: str) -> int:
        """Start a new generation for `target` and return its number."""
        generation = self._current.get(target, 0) + 1
        self._current[target] = generation
        return generation

    def current(self, target: str) -> int:
        return self._current.get(target, 0)

    def is_current(self, target: str, generation: int) -> bool:
        return self._current.get(target, 0) == generation

    def check(self, target: str, generation: int) -> None:
        """
        Raises:
            StaleRender: a newer generation exists for the target
        """
        if not self.is_current(target, generation):
            raise StaleRender(target, generation, self.current(target))

    # In-flight bookkeeping

    def mark_started(self, target: str) -> None:
        self._in_flight.add(target)

    def mark_finished(self, target: str) -> None:
        self._in_flight.discard(target)

    def is_in_flight(self, target: str) -> bool:
        return target in self._in_flight

    def invalidate_all(self) -> None:
        """Supersede every known target (document replaced)."""
        for target in list(self._current):
            self.advance(target)
