"""Workout totals per type and per calendar month."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from workout_tracker.models.workout import Workout, WorkoutData
from workout_tracker.services.template_helpers import local_time
from workout_tracker.services.workout_types import WorkoutType


@dataclass
class Totals:
    workouts: int = 0
    distance: float = 0.0  # meters
    duration: int = 0  # seconds
    repetitions: int = 0

    def add(self, distance: float | None, duration: int | None, repetitions: int | None) -> None:
        self.workouts += 1
        self.distance += distance or 0.0
        self.duration += duration or 0
        self.repetitions += repetitions or 0


@dataclass
class Statistics:
    by_type: dict[WorkoutType, Totals] = field(default_factory=dict)
    # month ("YYYY-MM", newest first) -> type -> totals
    by_month: dict[str, dict[WorkoutType, Totals]] = field(default_factory=dict)

    @property
    def empty(self) -> bool:
        return not self.by_type


Row = tuple[str, datetime | None, float | None, int | None, int | None]


def aggregate(rows: Iterable[Row], tz: str | None = None) -> Statistics:
    """Fold (type, date, distance, duration, repetitions) rows into totals.

    Months are taken in tz. Rows of an unknown type are skipped; undated rows only count per type.
    """
    by_type: dict[WorkoutType, Totals] = {}
    by_month: dict[str, dict[WorkoutType, Totals]] = {}
    for type_value, date, distance, duration, repetitions in rows:
        workout_type = WorkoutType.parse(type_value)
        if workout_type is None:
            continue
        by_type.setdefault(workout_type, Totals()).add(distance, duration, repetitions)
        local = local_time(date, tz)
        if local is None:
            continue
        month = by_month.setdefault(local.strftime("%Y-%m"), {})
        month.setdefault(workout_type, Totals()).add(distance, duration, repetitions)

    order = list(WorkoutType)
    return Statistics(
        by_type={t: by_type[t] for t in sorted(by_type, key=order.index)},
        by_month={
            m: {t: by_month[m][t] for t in sorted(by_month[m], key=order.index)}
            for m in sorted(by_month, reverse=True)
        },
    )


async def workout_statistics(session: AsyncSession, user_id: int, tz: str | None = None) -> Statistics:
    r = await session.execute(
        select(
            Workout.type,
            Workout.date,
            WorkoutData.total_distance,
            WorkoutData.total_duration,
            WorkoutData.total_repetitions,
        )
        .outerjoin(WorkoutData, WorkoutData.workout_id == Workout.id)
        .where(Workout.user_id == user_id)
    )
    return aggregate(r.all(), tz)
