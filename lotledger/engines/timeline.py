"""Event timeline: canonical chronological order of the history."""

from dataclasses import dataclass
from datetime import date, time

from lotledger.models.enums import EventKind, MovementDirection
from lotledger.models.history import History, Movement, Trade


@dataclass(frozen=True)
class TimelineEvent:
    kind: EventKind
    event_date: date
    event_time: time
    sequence: int
    record: Trade | Movement

    @property
    def sort_key(self) -> tuple[date, time, int]:
        """(date, time) first; ``sequence`` keeps source order on ties."""
        return (self.event_date, self.event_time, self.sequence)


def build_timeline(history: History) -> list[TimelineEvent]:
    """Order trades and asset movements chronologically.

    Bank movements are left out. ``sequence`` numbers trades first and then
    movements, each in recording order, so events stamped with the same
    minute replay in the order they appear in the history.
    """
    events: list[TimelineEvent] = []

    for trade in history.trades:
        events.append(
            TimelineEvent(
                kind=EventKind.TRADE,
                event_date=trade.trade_date,
                event_time=trade.trade_time,
                sequence=len(events),
                record=trade,
            )
        )

    for movement in history.movements:
        if not movement.affects_inventory:
            continue
        kind = (
            EventKind.INFLOW
            if movement.direction == MovementDirection.INFLOW
            else EventKind.OUTFLOW
        )
        events.append(
            TimelineEvent(
                kind=kind,
                event_date=movement.movement_date,
                event_time=movement.movement_time,
                sequence=len(events),
                record=movement,
            )
        )

    return sorted(events, key=lambda event: event.sort_key)
