"""Form bodies for manual workout entry and editing."""

import re
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field, field_validator

from workout_tracker.models.workout import Workout, WorkoutData
from workout_tracker.services.workout_merge import set_if_present
from workout_tracker.services.workout_types import WorkoutType

HTML_DATE_FORMAT = "%Y-%m-%dT%H:%M"
HTML_DURATION_FORMAT = "%H:%M"

# strptime alone accepts unpadded fields such as "2026-3-2T6:30"
_HTML_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}")
_HTML_DURATION_RE = re.compile(r"\d{2}:\d{2}")


class ManualWorkout(BaseModel):
    """Manual entry form; every field is optional and absent fields leave the workout untouched."""

    name: str | None = None
    date: str | None = None  # YYYY-MM-DDTHH:MM
    duration: str | None = None  # HH:MM
    distance: float | None = Field(None, ge=0)  # kilometers
    repetitions: int | None = Field(None, ge=0)
    weight: float | None = Field(None, ge=0)  # kilograms
    notes: str | None = None
    type: WorkoutType | None = None

    @field_validator("distance", "repetitions", "weight", "type", mode="before")
    @classmethod
    def _blank_is_absent(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @classmethod
    def from_form(cls, form: Any) -> "ManualWorkout":
        """Bind only the fields the form actually carries."""
        return cls(**{name: form.get(name) for name in cls.model_fields if name in form})

    def to_date(self) -> datetime | None:
        if self.date is None or not _HTML_DATE_RE.fullmatch(self.date):
            return None
        try:
            d = datetime.strptime(self.date, HTML_DATE_FORMAT)
        except ValueError:
            return None
        return d.replace(tzinfo=timezone.utc)

    def to_distance(self) -> float | None:
        """Distance in meters."""
        if self.distance is None:
            return None
        return self.distance * 1000

    def to_duration(self) -> int | None:
        """Duration in seconds."""
        if self.duration is None or not _HTML_DURATION_RE.fullmatch(self.duration):
            return None
        try:
            d = datetime.strptime(self.duration, HTML_DURATION_FORMAT)
        except ValueError:
            return None
        return d.hour * 3600 + d.minute * 60

    def update(self, workout: Workout) -> None:
        """Merge the present fields into workout; everything is parsed before anything is assigned."""
        date = self.to_date()
        distance = self.to_distance()
        duration = self.to_duration()
        workout_type = self.type.value if self.type is not None else None

        if workout.data is None:
            workout.data = WorkoutData()

        set_if_present(workout, "name", self.name)
        set_if_present(workout, "notes", self.notes)
        set_if_present(workout, "date", date)
        set_if_present(workout, "type", workout_type)

        set_if_present(workout.data, "total_distance", distance)
        set_if_present(workout.data, "total_duration", duration)
        set_if_present(workout.data, "total_repetitions", self.repetitions)
        set_if_present(workout.data, "total_weight", self.weight)

    @classmethod
    def from_workout(cls, workout: Workout) -> "ManualWorkout":
        """Form values that reproduce workout, for pre-filling the edit form."""
        data = workout.data
        duration = data.total_duration if data is not None and data.total_duration else 0
        return cls(
            name=workout.name,
            date=workout.date.strftime(HTML_DATE_FORMAT) if workout.date else None,
            duration=f"{duration // 3600:02d}:{duration % 3600 // 60:02d}",
            distance=round((data.total_distance or 0.0) / 1000, 3) if data is not None else None,
            repetitions=data.total_repetitions if data is not None else None,
            weight=data.total_weight if data is not None else None,
            notes=workout.notes,
            type=WorkoutType.parse(workout.type),
        )
