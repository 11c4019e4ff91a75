"""Nursery settings singleton: scan windows and the invoice due date strategy."""
from datetime import time
from enum import Enum

from pydantic import model_validator

from nursery.models.base import StoreModel

SETTINGS_PATH = "settings/nursery"


class DueDateStrategy(str, Enum):
    FIRST_DAY_NEXT_MONTH = "first_day_next_month"
    LAST_DAY_NEXT_MONTH = "last_day_next_month"


class NurserySettings(StoreModel):
    """Stored at settings/nursery as zero-padded HH:MM strings."""

    check_in_start_time: time = time(7, 0)
    check_in_end_time: time = time(10, 0)
    check_out_start_time: time = time(13, 0)
    check_out_end_time: time = time(16, 0)
    next_due_date_strategy: DueDateStrategy = DueDateStrategy.FIRST_DAY_NEXT_MONTH

    @model_validator(mode="after")
    def _check_windows(self):
        if self.check_in_start_time > self.check_in_end_time:
            raise ValueError("check-in window starts after it ends")
        if self.check_out_start_time > self.check_out_end_time:
            raise ValueError("check-out window starts after it ends")
        return self

    def to_store(self) -> dict:
        data = super().to_store()
        for key in ("checkInStartTime", "checkInEndTime", "checkOutStartTime", "checkOutEndTime"):
            data[key] = data[key][:5]
        return data

    def to_api(self) -> dict:
        return self.to_store()
