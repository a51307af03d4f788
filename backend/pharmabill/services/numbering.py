"""Invoice number sequencing.

The next number is derived from the numbers already issued. Strategies are
pluggable; numbering never blocks invoice creation, so an unparsable
history falls back to a timestamp-based number instead of raising.
Uniqueness is enforced by storage, not here.
"""
import logging
import re
import time
from typing import Callable, Iterable, List, Optional, Protocol, Tuple

from pharmabill.core.config import settings

logger = logging.getLogger(__name__)

_NUMBER_PATTERN = re.compile(r"^(?P<prefix>.+)-(?P<number>\d+)$")


def parse_invoice_number(invoice_number: str) -> Optional[Tuple[str, int]]:
    """Split "<prefix>-<digits>" into (prefix, number). None if it doesn't fit."""
    match = _NUMBER_PATTERN.match(invoice_number.strip())
    if not match:
        return None
    return match.group("prefix"), int(match.group("number"))


def format_invoice_number(prefix: str, number: int) -> str:
    return f"{prefix}-{number:03d}"


def _epoch_millis() -> int:
    return int(time.time() * 1000)


class SequenceStrategy(Protocol):
    def next_number(self, existing_numbers: List[str]) -> str:
        ...


class LexicographicSequence:
    """Increment the textually greatest number.

    Only correct while every number shares one prefix and one digit width
    ("INV-099" sorts above "INV-1000").
    """

    def __init__(
        self,
        seed: str = None,
        prefix: str = None,
        clock: Callable[[], int] = _epoch_millis,
    ):
        self.seed = seed or settings.INVOICE_SEED
        self.prefix = prefix or settings.INVOICE_PREFIX
        self.clock = clock

    def next_number(self, existing_numbers: List[str]) -> str:
        if not existing_numbers:
            return self.seed

        last = max(existing_numbers)
        parsed = parse_invoice_number(last)
        if parsed is None:
            return self.fallback(last)
        prefix, number = parsed
        return format_invoice_number(prefix, number + 1)

    def fallback(self, last: str) -> str:
        fallback = f"{self.prefix}-{self.clock()}"
        logger.warning(f"[NUMBERING] Cannot parse '{last}', using fallback {fallback}")
        return fallback


class NumericSequence(LexicographicSequence):
    """Increment the numerically greatest parsable number.

    Unparsable entries are ignored; only a history with no parsable entry
    falls back to a timestamp.
    """

    def next_number(self, existing_numbers: List[str]) -> str:
        if not existing_numbers:
            return self.seed

        parsed = [p for p in (parse_invoice_number(n) for n in existing_numbers) if p]
        if not parsed:
            return self.fallback(max(existing_numbers))
        prefix, number = max(parsed, key=lambda p: p[1])
        return format_invoice_number(prefix, number + 1)


STRATEGIES = {
    "lexicographic": LexicographicSequence,
    "numeric": NumericSequence,
}


def get_sequence_strategy(name: str = None) -> SequenceStrategy:
    name = (name or settings.INVOICE_SEQUENCE).lower()
    strategy_cls = STRATEGIES.get(name)
    if strategy_cls is None:
        logger.warning(f"[NUMBERING] Unknown sequence strategy '{name}', using lexicographic")
        strategy_cls = LexicographicSequence
    return strategy_cls()


def next_invoice_number(invoices: Iterable, strategy: SequenceStrategy = None) -> str:
    """Propose the next invoice number from the existing invoice collection."""
    strategy = strategy or get_sequence_strategy()
    numbers = [inv.invoice_number for inv in invoices if inv.invoice_number]
    return strategy.next_number(numbers)
