from datetime import date, datetime, timedelta, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class DayWindowRecord(BaseModel):
    """The three scalar fields a day window is persisted as."""

    start_of_day_epoch_millis: int
    zone_offset_at_start_seconds: int
    calendar_date_iso: str = Field(pattern=r"^\d{4}-\d{2}-\d{2}$")

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class DayWindow(BaseModel):
    """
    The local day being tracked: the absolute instant of its local midnight,
    the UTC offset in force at that midnight, and the calendar date it stands
    for. Pinned once created; a later zone change does not move it.
    """

    start_instant: datetime
    zone_offset_at_start: int = Field(description="UTC offset in seconds.")
    calendar_date: date

    model_config = ConfigDict(frozen=True)

    @field_validator("start_instant")
    @classmethod
    def _normalise_instant(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            raise ValueError("start_instant must be timezone-aware")
        value = value.astimezone(timezone.utc)
        return value.replace(microsecond=(value.microsecond // 1000) * 1000)

    @property
    def start_epoch_millis(self) -> int:
        return (self.start_instant - _EPOCH) // timedelta(milliseconds=1)

    def to_record(self) -> DayWindowRecord:
        return DayWindowRecord(
            start_of_day_epoch_millis=self.start_epoch_millis,
            zone_offset_at_start_seconds=self.zone_offset_at_start,
            calendar_date_iso=self.calendar_date.isoformat(),
        )

    @classmethod
    def from_record(cls, record: DayWindowRecord) -> "DayWindow":
        return cls(
            start_instant=_EPOCH
            + timedelta(milliseconds=record.start_of_day_epoch_millis),
            zone_offset_at_start=record.zone_offset_at_start_seconds,
            calendar_date=date.fromisoformat(record.calendar_date_iso),
        )
