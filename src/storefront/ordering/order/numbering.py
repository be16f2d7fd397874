"""Human-readable order numbers: ``ORD<YY><MM><DD><NNNN>``.

The per-day counter lives in its own ``DailyOrderSequence`` aggregate and is
incremented inside the placing command's unit of work, so two orders never
derive their number from the same observed count.
"""

from datetime import UTC, date, datetime

from protean.fields import Integer, String

from storefront.domain import storefront


def format_order_number(day: date, sequence: int) -> str:
    return f"ORD{day:%y%m%d}{sequence:04d}"


def order_number_from_count(day: date, orders_so_far_today: int) -> str:
    """Number an order from a count of the orders already placed today.

    Two callers that observe the same count produce the same number; kept so
    that the collision stays demonstrable next to the sequence-backed path.
    """
    return format_order_number(day, orders_so_far_today + 1)


@storefront.aggregate
class DailyOrderSequence:
    day = String(identifier=True, max_length=10)  # ISO date, local time
    value = Integer(default=0, min_value=0)

    @classmethod
    def start(cls, day: date):
        return cls(day=day.isoformat(), value=0)

    def next(self) -> int:
        self.value += 1
        return self.value


@storefront.repository(part_of=DailyOrderSequence)
class DailyOrderSequenceRepository:
    def for_day(self, day: date) -> DailyOrderSequence:
        matches = self._dao.query.filter(day=day.isoformat()).all().items
        return matches[0] if matches else DailyOrderSequence.start(day)


def next_order_number(repository, today: date | None = None) -> str:
    """Reserve the next number for ``today`` and stage the counter for saving."""
    today = today or datetime.now(UTC).date()
    sequence = repository.for_day(today)
    number = format_order_number(today, sequence.next())
    repository.add(sequence)
    return number
