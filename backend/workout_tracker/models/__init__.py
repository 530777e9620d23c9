from workout_tracker.models.user import Profile, User
from workout_tracker.models.equipment import Equipment
from workout_tracker.models.workout import Workout, WorkoutData
from workout_tracker.models.audit_log import AuditLog

__all__ = [
    "User",
    "Profile",
    "Equipment",
    "Workout",
    "WorkoutData",
    "AuditLog",
]
