"""/v1/habits - habit detection, reminder evaluation and reminder state updates"""

import time
import logging
from dataclasses import asdict
from datetime import tzinfo
from typing import Callable
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from smartspend_gateway.api.v1.schemas import (
    HabitDetectRequest,
    HabitDetectResponse,
    HabitListResponse,
    HabitPatternSchema,
    ReminderActionRequest,
    ReminderRequest,
    ReminderResponse,
    ReminderSchema,
    ReminderStateSchema,
    SnoozeRequest,
)
from smartspend_gateway.api.dependencies import get_local_timezone, get_request_id
from smartspend_gateway.domain.habits import build_habit_patterns
from smartspend_gateway.domain.models import HabitReminderState
from smartspend_gateway.domain.reminder_state import dismiss, mark_reminded, new_reminder_state, snooze
from smartspend_gateway.domain.reminders import find_due_habit_reminder
from smartspend_gateway.domain.transactions import load_transactions, parse_timestamp
from smartspend_gateway.infrastructure.database.session import get_db
from smartspend_gateway.infrastructure.database.repositories import HabitPatternRepository, ReminderStateRepository
from smartspend_gateway.infrastructure.observability.logging import log_habit_detection, log_reminder
from smartspend_gateway.infrastructure.observability.metrics import (
    habit_patterns_counter,
    record_reminder,
    skipped_transactions_counter,
)

router = APIRouter()


@router.post("/habits/detect", response_model=HabitDetectResponse)
def detect_habits(
    request_body: HabitDetectRequest,
    request: Request,
    db: Session = Depends(get_db),
    tz: tzinfo = Depends(get_local_timezone),
):
    """
    Rebuild habit patterns from transaction history and store them.

    Flow:
    1. Parse raw transactions, skipping malformed records
    2. Detect patterns as of `now`
    3. Upsert patterns by habit id
    """
    start_time = time.time()
    request_id = get_request_id(request)

    now = parse_timestamp(request_body.now, tz)
    records = [t.model_dump() for t in request_body.transactions]
    transactions = load_transactions(records, tz)
    skipped = len(records) - len(transactions)

    patterns = build_habit_patterns(transactions, now)

    try:
        HabitPatternRepository(db).upsert_patterns(patterns)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logging.error(f"Failed to store habit patterns: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    duration_ms = (time.time() - start_time) * 1000
    skipped_transactions_counter.inc(skipped)
    habit_patterns_counter.inc(len(patterns))
    log_habit_detection(request_id, len(records), skipped, len(patterns), duration_ms)

    return HabitDetectResponse(
        patterns=[HabitPatternSchema.model_validate(asdict(p)) for p in patterns],
        skipped_transactions=skipped,
    )


@router.get("/habits", response_model=HabitListResponse)
def list_habits(db: Session = Depends(get_db)):
    """Stored habit patterns, ordered by habit id"""
    patterns = HabitPatternRepository(db).list_patterns()
    return HabitListResponse(patterns=[HabitPatternSchema.model_validate(asdict(p)) for p in patterns])


@router.post("/habits/reminder", response_model=ReminderResponse)
def due_reminder(
    request_body: ReminderRequest,
    request: Request,
    db: Session = Depends(get_db),
    tz: tzinfo = Depends(get_local_timezone),
):
    """
    Evaluate stored patterns against recent transactions and reminder state.

    Returns at most one reminder. Showing it is the caller's job, who then
    reports back through /reminded, /snooze or /dismiss.
    """
    start_time = time.time()
    request_id = get_request_id(request)

    now = parse_timestamp(request_body.now, tz)
    transactions = load_transactions([t.model_dump() for t in request_body.transactions], tz)
    patterns = HabitPatternRepository(db).list_patterns()
    states = ReminderStateRepository(db).get_states()

    candidate = find_due_habit_reminder(patterns, transactions, states, now)

    habit_id = candidate.habit_id if candidate else None
    record_reminder(habit_id)
    log_reminder(request_id, habit_id, (time.time() - start_time) * 1000)

    if candidate is None:
        return ReminderResponse(reminder=None)
    return ReminderResponse(reminder=ReminderSchema.model_validate(asdict(candidate)))


def _apply_transition(
    db: Session,
    habit_id: str,
    transition: Callable[[HabitReminderState], HabitReminderState],
) -> ReminderStateSchema:
    if not HabitPatternRepository(db).exists(habit_id):
        raise HTTPException(status_code=404, detail="Habit not found")

    repo = ReminderStateRepository(db)
    state = repo.get_state(habit_id) or new_reminder_state(habit_id)
    updated = transition(state)

    try:
        repo.save_state(updated)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logging.error(f"Failed to store reminder state: {e}", extra={"habit_id": habit_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    return ReminderStateSchema.model_validate(asdict(updated))


@router.post("/habits/{habit_id}/reminded", response_model=ReminderStateSchema)
def reminder_shown(habit_id: str, request_body: ReminderActionRequest, db: Session = Depends(get_db)):
    return _apply_transition(db, habit_id, lambda s: mark_reminded(s, request_body.today))


@router.post("/habits/{habit_id}/snooze", response_model=ReminderStateSchema)
def snooze_reminder(habit_id: str, request_body: SnoozeRequest, db: Session = Depends(get_db)):
    return _apply_transition(db, habit_id, lambda s: snooze(s, request_body.until))


@router.post("/habits/{habit_id}/dismiss", response_model=ReminderStateSchema)
def dismiss_reminder(habit_id: str, request_body: ReminderActionRequest, db: Session = Depends(get_db)):
    return _apply_transition(db, habit_id, lambda s: dismiss(s, request_body.today))
