"""
Selection events (chart-to-chart signal)
========================================

Clicking a country in the bar chart must redraw the Sankey diagram for that
country alone. Instead of a global event bus, charts talk through an explicit
`SelectionChannel`: publishers call `publish(...)`, subscribers register a
callback and get back an unsubscribe function.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, List
import logging

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class CountrySelected:
    """A user picked one country."""
    country: str

Subscriber = Callable[[CountrySelected], None]

class SelectionChannel:
    """Typed publish/subscribe channel for `CountrySelected` events.

    Each published event reaches every subscriber exactly once, in
    subscription order. Subscriber errors propagate to the publisher.
    """

    def __init__(self) -> None:
        self._subscribers: List[Subscriber] = []
        self.published = 0

    def subscribe(self, fn: Subscriber) -> Callable[[], None]:
        self._subscribers.append(fn)

        def unsubscribe() -> None:
            if fn in self._subscribers:
                self._subscribers.remove(fn)
        return unsubscribe

    def publish(self, event: CountrySelected) -> None:
        if not isinstance(event, CountrySelected):
            raise TypeError(f"expected CountrySelected, got {type(event).__name__}")
        self.published += 1
        logger.debug("Country selected: %s", event.country)
        for fn in list(self._subscribers):
            fn(event)

    def select(self, country: str) -> None:
        """Shortcut for `publish(CountrySelected(country))`."""
        self.publish(CountrySelected(country))

    def __len__(self) -> int:
        return len(self._subscribers)
