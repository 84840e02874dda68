"""Reminder state transitions driven by user interaction"""

from dataclasses import replace
from datetime import date

from smartspend_gateway.domain.models import HabitReminderState


def new_reminder_state(habit_id: str) -> HabitReminderState:
    return HabitReminderState(habit_id=habit_id)


def mark_reminded(state: HabitReminderState, today: date) -> HabitReminderState:
    """Reminder was shown today; suppresses repeats until tomorrow"""
    return replace(state, last_reminded_date=today)


def snooze(state: HabitReminderState, until: date) -> HabitReminderState:
    """Silence the habit through `until` (inclusive)"""
    return replace(state, snoozed_until=until)


def dismiss(state: HabitReminderState, today: date) -> HabitReminderState:
    return replace(
        state,
        last_reminded_date=today,
        dismiss_count_recent=state.dismiss_count_recent + 1,
    )
