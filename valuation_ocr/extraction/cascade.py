"""Ordered evaluation of field extraction strategies.

A strategy is a named pure function of the normalized text that returns
a value or ``None``. Cascades try strategies in order and keep the first
value produced.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

from valuation_ocr.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Strategy(Generic[T]):
    """A named extraction function."""

    name: str
    func: Callable[[str], T | None]

    def __call__(self, text: str) -> T | None:
        return self.func(text)


@dataclass(frozen=True)
class Match(Generic[T]):
    """A value together with the strategy that produced it."""

    value: T
    source: str


def first_match(strategies: Sequence[Strategy[T]], text: str) -> Match[T] | None:
    """Run strategies in order and return the first non-empty result.

    Args:
        strategies: Strategies in priority order.
        text: Normalized OCR text.

    Returns:
        The first match, or ``None`` when every strategy came up empty.
    """
    for strategy in strategies:
        value = strategy(text)
        if value is None or value == "":
            continue
        logger.debug("Strategy %s matched: %r", strategy.name, value)
        return Match(value, strategy.name)
    return None
