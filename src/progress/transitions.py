"""Progress state machine.

The legal edges are listed explicitly in ``PROGRESS_TRANSITIONS``; any
(from, to) pair missing from the table is rejected. Each edge may carry a
guard (returns the reasons it fails, empty when it holds) and a side effect
(extra fields to set). Nothing here mutates the record: callers get back the
delta to merge and persist.

    not_started -> in_progress   always; sets started_at, last_accessed_at
    not_started -> locked        prerequisites not met
    locked      -> not_started   prerequisites met; sets unlocked_at
    in_progress -> completed     completion_rate >= 100 and all criteria met;
                                 sets completed_at
    in_progress -> failed        assessment score below passing score
    failed      -> in_progress   attempts below the cap (or no cap)
    completed   -> in_progress   always (re-take)
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any, NamedTuple

from src.utils.timestamps import utc_now

from .exceptions import MalformedProgressError
from .models import DEFAULT_PASSING_SCORE, FULL_COMPLETION_RATE, ProgressStatus
from .schemas import LessonProgress, ModuleProgress, ProgressRecord, TransitionContext


Guard = Callable[[ProgressRecord, TransitionContext], list[str]]
SideEffect = Callable[[ProgressRecord, datetime], dict[str, Any]]


class TransitionResult(NamedTuple):
    """Outcome of a transition request."""

    valid: bool
    errors: list[str]
    updates: dict[str, Any]


@dataclass(frozen=True)
class Transition:
    """One edge of the progress state machine."""

    source: ProgressStatus
    target: ProgressStatus
    guard: Guard | None = None
    side_effect: SideEffect | None = None


# ==============================================================================
# Guards
# ==============================================================================


def _prerequisites_met(record: ProgressRecord, context: TransitionContext) -> bool:
    if context.prerequisites_met is not None:
        return context.prerequisites_met
    return getattr(record, "prerequisites_met", False)


def _guard_lock(record: ProgressRecord, context: TransitionContext) -> list[str]:
    if _prerequisites_met(record, context):
        return ["Prerequisites are met; nothing to lock"]
    return []


def _guard_unlock(record: ProgressRecord, context: TransitionContext) -> list[str]:
    if not _prerequisites_met(record, context):
        return ["Prerequisites not met"]
    return []


def _guard_complete(record: ProgressRecord, context: TransitionContext) -> list[str]:
    errors = []
    if record.completion_rate < FULL_COMPLETION_RATE:
        errors.append(
            f"Completion rate {record.completion_rate:g} is below "
            f"{FULL_COMPLETION_RATE}"
        )
    if isinstance(record, LessonProgress):
        errors.extend(
            f"Completion criterion not met: {name}"
            for name in record.meets_criteria.unmet()
        )
    return errors


def _guard_fail(record: ProgressRecord, context: TransitionContext) -> list[str]:
    score = getattr(record, "assessment_score", None)
    if score is None:
        return ["No assessment score recorded"]
    passing_score = (
        context.passing_score
        if context.passing_score is not None
        else DEFAULT_PASSING_SCORE
    )
    if score >= passing_score:
        return [f"Assessment score {score:g} meets passing score {passing_score:g}"]
    return []


def _guard_retry(record: ProgressRecord, context: TransitionContext) -> list[str]:
    if context.max_attempts is None:
        return []
    if isinstance(record, ModuleProgress):
        attempts = record.attempts
    else:
        attempts = getattr(record, "assessment_attempts", 0)
    if attempts >= context.max_attempts:
        return [f"Attempt limit reached ({attempts}/{context.max_attempts})"]
    return []


# ==============================================================================
# Side Effects
# ==============================================================================


def _mark_started(record: ProgressRecord, now: datetime) -> dict[str, Any]:
    return {"started_at": now, "last_accessed_at": now}


def _mark_unlocked(record: ProgressRecord, now: datetime) -> dict[str, Any]:
    return {"unlocked_at": now}


def _mark_completed(record: ProgressRecord, now: datetime) -> dict[str, Any]:
    return {"completed_at": now}


PROGRESS_TRANSITIONS: tuple[Transition, ...] = (
    Transition(
        ProgressStatus.NOT_STARTED,
        ProgressStatus.IN_PROGRESS,
        side_effect=_mark_started,
    ),
    Transition(ProgressStatus.NOT_STARTED, ProgressStatus.LOCKED, guard=_guard_lock),
    Transition(
        ProgressStatus.LOCKED,
        ProgressStatus.NOT_STARTED,
        guard=_guard_unlock,
        side_effect=_mark_unlocked,
    ),
    Transition(
        ProgressStatus.IN_PROGRESS,
        ProgressStatus.COMPLETED,
        guard=_guard_complete,
        side_effect=_mark_completed,
    ),
    Transition(ProgressStatus.IN_PROGRESS, ProgressStatus.FAILED, guard=_guard_fail),
    Transition(ProgressStatus.FAILED, ProgressStatus.IN_PROGRESS, guard=_guard_retry),
    Transition(ProgressStatus.COMPLETED, ProgressStatus.IN_PROGRESS),
)

_TRANSITION_INDEX: dict[tuple[ProgressStatus, ProgressStatus], Transition] = {
    (t.source, t.target): t for t in PROGRESS_TRANSITIONS
}


# ==============================================================================
# Public API
# ==============================================================================


def coerce_status(value: ProgressStatus | str) -> ProgressStatus:
    """Convert a raw status value, raising for values outside the enum."""
    try:
        return ProgressStatus(value)
    except ValueError as e:
        msg = f"Unknown progress status: {value!r}"
        raise MalformedProgressError(msg) from e


def find_transition(
    source: ProgressStatus, target: ProgressStatus
) -> Transition | None:
    """Look up the table edge for (source, target)."""
    return _TRANSITION_INDEX.get((source, target))


def _check_transition(
    record: ProgressRecord,
    target: ProgressStatus | str,
    context: TransitionContext | None,
) -> tuple[Transition | None, TransitionResult]:
    """Find the edge for ``target`` and run its guard."""
    if not isinstance(record, ProgressRecord):
        msg = f"Expected a progress record, got {type(record).__name__}"
        raise MalformedProgressError(msg)

    target = coerce_status(target)
    context = context or TransitionContext()

    transition = find_transition(record.status, target)
    if transition is None:
        return None, TransitionResult(
            False,
            [f"Invalid transition from {record.status.value} to {target.value}"],
            {},
        )

    if transition.guard is not None:
        errors = transition.guard(record, context)
        if errors:
            return None, TransitionResult(False, errors, {})

    return transition, TransitionResult(True, [], {})


def is_valid_transition(
    record: ProgressRecord,
    target: ProgressStatus | str,
    context: TransitionContext | None = None,
) -> TransitionResult:
    """Check whether ``record`` may move to ``target`` right now."""
    return _check_transition(record, target, context)[1]


def apply_transition(
    record: ProgressRecord,
    target: ProgressStatus | str,
    context: TransitionContext | None = None,
    now: datetime | None = None,
) -> TransitionResult:
    """Validate a transition and build the delta to persist.

    The delta always contains ``status``, ``updated_at`` and the next
    ``version``, plus the edge's side-effect fields. A rejected transition
    returns no updates at all.
    """
    transition, check = _check_transition(record, target, context)
    if transition is None:
        return check

    now = now or utc_now()
    updates: dict[str, Any] = {
        "status": transition.target,
        "updated_at": now,
        "version": record.version + 1,
    }
    if transition.side_effect is not None:
        updates.update(transition.side_effect(record, now))

    return TransitionResult(True, [], updates)


def allowed_targets(
    record: ProgressRecord, context: TransitionContext | None = None
) -> list[ProgressStatus]:
    """Statuses ``record`` could move to right now, in table order."""
    return [
        t.target
        for t in PROGRESS_TRANSITIONS
        if t.source == record.status
        and is_valid_transition(record, t.target, context).valid
    ]
