import enum


class WorkoutType(str, enum.Enum):
    RUNNING = "running"
    CYCLING = "cycling"
    WALKING = "walking"
    HIKING = "hiking"
    SWIMMING = "swimming"
    SKIING = "skiing"
    KAYAKING = "kayaking"
    GOLFING = "golfing"
    PUSH_UPS = "push-ups"
    WEIGHT_LIFTING = "weight-lifting"

    @classmethod
    def parse(cls, value: str | None) -> "WorkoutType | None":
        if not value:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None

    @property
    def is_distance(self) -> bool:
        return self in DISTANCE_TYPES

    @property
    def is_repetition(self) -> bool:
        return self in REPETITION_TYPES

    @property
    def is_weight(self) -> bool:
        return self in WEIGHT_TYPES

    @property
    def label(self) -> str:
        return self.value.replace("-", " ").capitalize()


DISTANCE_TYPES = frozenset(
    {
        WorkoutType.RUNNING,
        WorkoutType.CYCLING,
        WorkoutType.WALKING,
        WorkoutType.HIKING,
        WorkoutType.SWIMMING,
        WorkoutType.SKIING,
        WorkoutType.KAYAKING,
        WorkoutType.GOLFING,
    }
)
REPETITION_TYPES = frozenset({WorkoutType.PUSH_UPS, WorkoutType.WEIGHT_LIFTING})
WEIGHT_TYPES = frozenset({WorkoutType.WEIGHT_LIFTING})

DEFAULT_WORKOUT_TYPE = WorkoutType.RUNNING
DEFAULT_TOTALS_SHOW = WorkoutType.RUNNING

# FIT "sport" values (as reported by fitparse) to our types
FIT_SPORT_TYPES: dict[str, WorkoutType] = {
    "running": WorkoutType.RUNNING,
    "cycling": WorkoutType.CYCLING,
    "e_biking": WorkoutType.CYCLING,
    "walking": WorkoutType.WALKING,
    "hiking": WorkoutType.HIKING,
    "swimming": WorkoutType.SWIMMING,
    "cross_country_skiing": WorkoutType.SKIING,
    "alpine_skiing": WorkoutType.SKIING,
    "kayaking": WorkoutType.KAYAKING,
    "paddling": WorkoutType.KAYAKING,
    "golf": WorkoutType.GOLFING,
    "training": WorkoutType.WEIGHT_LIFTING,
}


def workout_types() -> list[WorkoutType]:
    return list(WorkoutType)


def type_from_sport(sport: str | None) -> WorkoutType | None:
    if not sport:
        return None
    return FIT_SPORT_TYPES.get(str(sport).lower())
