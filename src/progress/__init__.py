"""Workbook progress tracking module.

Provides:
- Module and lesson progress state machine
- Weighted progress percentage and completion criteria
- Learning streaks and period analytics
"""

from .models import ActivityType, ProgressStatus
from .schemas import (
    ActivityRecord,
    AssessmentProgress,
    LessonProgress,
    ModuleProgress,
)
from .service import ProgressEngine, ProgressError


__all__ = [
    "ActivityRecord",
    "ActivityType",
    "AssessmentProgress",
    "LessonProgress",
    "ModuleProgress",
    "ProgressEngine",
    "ProgressError",
    "ProgressStatus",
]
