"""Data access layer for habit patterns and reminder state"""

from typing import Dict, Iterable, List, Optional
from sqlalchemy.orm import Session
from smartspend_gateway.infrastructure.database.models import HabitPatternRecord, HabitReminderStateRecord
from smartspend_gateway.domain.models import HabitPattern, HabitReminderState


def _pattern_from_row(row: HabitPatternRecord) -> HabitPattern:
    return HabitPattern(
        habit_id=row.habit_id,
        category=row.category,
        merchant_key=row.merchant_key,
        amount_bucket=row.amount_bucket,
        amount_median=row.amount_median or 0,
        amount_mad=row.amount_mad,
        interval_type=row.interval_type,
        interval_days_median=row.interval_days_median,
        dow_prob=list(row.dow_prob or [0.0] * 7),
        time_window_start_min=row.time_start_min,
        time_window_end_min=row.time_end_min,
        active=True if row.active is None else row.active,
        updated_at=row.updated_at,
    )


def _state_from_row(row: HabitReminderStateRecord) -> HabitReminderState:
    return HabitReminderState(
        habit_id=row.habit_id,
        last_reminded_date=row.last_reminded_date,
        snoozed_until=row.snoozed_until,
        dismiss_count_recent=row.dismiss_count_recent or 0,
    )


class HabitPatternRepository:
    """Repository for detected habit patterns"""

    def __init__(self, db: Session):
        self.db = db

    def upsert_patterns(self, patterns: Iterable[HabitPattern]) -> None:
        """Insert new patterns, overwrite existing ones by habit id"""
        for pattern in patterns:
            row = self.db.get(HabitPatternRecord, pattern.habit_id)
            if row is None:
                row = HabitPatternRecord(habit_id=pattern.habit_id)
                self.db.add(row)
            row.category = pattern.category
            row.merchant_key = pattern.merchant_key
            row.amount_bucket = pattern.amount_bucket
            row.amount_median = pattern.amount_median
            row.amount_mad = pattern.amount_mad
            row.interval_type = pattern.interval_type
            row.interval_days_median = pattern.interval_days_median
            row.dow_prob = list(pattern.dow_prob)
            row.time_start_min = pattern.time_window_start_min
            row.time_end_min = pattern.time_window_end_min
            row.active = pattern.active
            row.updated_at = pattern.updated_at
        self.db.flush()

    def list_patterns(self) -> List[HabitPattern]:
        rows = self.db.query(HabitPatternRecord).order_by(HabitPatternRecord.habit_id).all()
        return [_pattern_from_row(row) for row in rows]

    def exists(self, habit_id: str) -> bool:
        return self.db.get(HabitPatternRecord, habit_id) is not None


class ReminderStateRepository:
    """Repository for per-habit reminder state"""

    def __init__(self, db: Session):
        self.db = db

    def get_states(self) -> Dict[str, HabitReminderState]:
        rows = self.db.query(HabitReminderStateRecord).all()
        return {row.habit_id: _state_from_row(row) for row in rows}

    def get_state(self, habit_id: str) -> Optional[HabitReminderState]:
        row = self.db.get(HabitReminderStateRecord, habit_id)
        return _state_from_row(row) if row else None

    def save_state(self, state: HabitReminderState) -> None:
        row = self.db.get(HabitReminderStateRecord, state.habit_id)
        if row is None:
            row = HabitReminderStateRecord(habit_id=state.habit_id)
            self.db.add(row)
        row.last_reminded_date = state.last_reminded_date
        row.snoozed_until = state.snoozed_until
        row.dismiss_count_recent = state.dismiss_count_recent
        self.db.flush()
