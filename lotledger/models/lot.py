"""Lot model: a priced batch of the tracked asset."""

from datetime import date, time
from decimal import Decimal

from pydantic import BaseModel, Field

START_OF_DAY = time(0, 0)


class Lot(BaseModel):
    id: str
    acquired_date: date
    acquired_time: time = START_OF_DAY
    unit_cost: Decimal = Field(gt=0)
    original_quantity: Decimal = Field(ge=0)
    remaining_quantity: Decimal = Field(ge=0)

    @property
    def is_active(self) -> bool:
        return self.remaining_quantity > 0

    @property
    def fifo_key(self) -> tuple[date, time]:
        """Acquisition instant used for FIFO ordering."""
        return (self.acquired_date, self.acquired_time)

    @property
    def remaining_cost(self) -> Decimal:
        return self.remaining_quantity * self.unit_cost
