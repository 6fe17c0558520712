"""Per-entry outcome reporting for multi-entry operations."""

import sys
from collections import Counter
from dataclasses import dataclass
from typing import Callable, Optional

ADDED = "added"
SKIPPED = "skipped"
WARNING = "warning"
ERROR = "error"

STATUSES = (ADDED, SKIPPED, WARNING, ERROR)


@dataclass
class Outcome:
    """A single reported outcome."""

    status: str
    label: str  # short id prefix or file path
    message: str

    def __str__(self) -> str:
        return f"[{self.status}]\t{self.label}\t{self.message}"


def short_id(image_id: str) -> str:
    """Identifying prefix used in outcome lines."""
    return image_id[:8] if image_id else "--------"


class OutcomeSink:
    """Collects outcomes and writes one line per outcome.

    Import loops report through a sink instead of raising, so one bad entry
    never stops the rest of the operation.
    """

    def __init__(self, write: Optional[Callable[[str], None]] = None):
        """Initialize the sink.

        Args:
            write: Line writer (e.g. ``print`` or ``tqdm.write``). Defaults to
                writing to stdout. Pass ``lambda line: None`` to only collect.
        """
        self._write = write or (lambda line: print(line, file=sys.stdout))
        self.outcomes: list[Outcome] = []

    def report(self, status: str, label: str, message: str) -> None:
        if status not in STATUSES:
            raise ValueError(f"Unknown outcome status: {status}")
        outcome = Outcome(status, label, message)
        self.outcomes.append(outcome)
        self._write(str(outcome))

    def added(self, image_id: str, message: str) -> None:
        self.report(ADDED, short_id(image_id), message)

    def skipped(self, image_id: str, message: str) -> None:
        self.report(SKIPPED, short_id(image_id), message)

    def warning(self, image_id: str, message: str) -> None:
        self.report(WARNING, short_id(image_id), message)

    def error(self, label: str, message: str) -> None:
        self.report(ERROR, label, message)

    def counts(self) -> Counter:
        return Counter(o.status for o in self.outcomes)

    def of(self, status: str) -> list[Outcome]:
        return [o for o in self.outcomes if o.status == status]

    def summary(self) -> str:
        counts = self.counts()
        return (
            f"{counts[ADDED]} added, {counts[SKIPPED]} skipped, "
            f"{counts[WARNING]} warning(s), {counts[ERROR]} error(s)"
        )
