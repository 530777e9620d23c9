"""Batch ingestion of uploaded activity files with a per-file outcome."""

import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from typing import Protocol

from workout_tracker.models.workout import Workout, WorkoutValidationError
from workout_tracker.services.i18n import Localizer
from workout_tracker.services.ingest import WorkoutIngestError

logger = logging.getLogger(__name__)


class UploadedFile(Protocol):
    filename: str | None

    async def read(self) -> bytes: ...


CreateWorkout = Callable[[str, bytes], Awaitable[Workout]]


@dataclass
class UploadSummary:
    created: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def error(self, localizer: Localizer) -> str | None:
        if not self.errors:
            return None
        return localizer.gettext(
            "Encountered %d problems while adding workouts: %s", len(self.errors), "; ".join(self.errors)
        )

    def notice(self, localizer: Localizer) -> str | None:
        if not self.created:
            return None
        return localizer.gettext("Added %d new workout(s): %s", len(self.created), "; ".join(self.created))


async def add_workouts_from_files(files: Iterable[UploadedFile], create: CreateWorkout) -> UploadSummary:
    """Ingest every file in upload order; one file failing never stops the others.

    Database errors are not caught: they leave the session unusable and abort the request.
    """
    summary = UploadSummary()
    for file in files:
        filename = file.filename or ""
        try:
            content = await file.read()
        except OSError as e:
            logger.warning("Upload: could not read %s: %s", filename, e)
            summary.errors.append(str(e))
            continue
        try:
            w = await create(filename, content)
        except (WorkoutIngestError, WorkoutValidationError) as e:
            logger.info("Upload: %s rejected: %s", filename, e)
            summary.errors.append(str(e))
            continue
        summary.created.append(w.name)
    return summary
