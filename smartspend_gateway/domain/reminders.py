"""Habit reminder matching - decides whether a habit reminder should fire now"""

from datetime import datetime
from typing import List, Mapping, Optional, Sequence

from smartspend_gateway.domain.habits import amount_bucket, merchant_key_from_description
from smartspend_gateway.domain.models import (
    HabitPattern,
    HabitReminderCandidate,
    HabitReminderState,
    Transaction,
)
from smartspend_gateway.domain.stats import clamp, median, round_half_up
from smartspend_gateway.utils.date_utils import (
    diff_days,
    minutes_from_midnight,
    start_of_month,
    start_of_week,
    sunday_first_weekday,
)

NOON_MIN = 12 * 60
EVENING_MIN = 18 * 60
WINDOW_GRACE_MIN = 120
WEEKLY_MIN_DOW_PROB = 0.4
DAILY_MIN_DOW_PROB = 0.6
MONTHLY_DAY_TOLERANCE = 7
MONTHLY_DOM_SAMPLES = 6

INTERVAL_BOOST = {"daily": 0.2, "weekly": 0.1}
CADENCE_HINTS = {"weekly": "this week", "monthly": "this month"}


def matches_pattern(tx: Transaction, pattern: HabitPattern) -> bool:
    """Same expense category plus same merchant key (or amount bucket when there is none)"""
    if tx.type != "expense" or tx.category != pattern.category:
        return False
    if pattern.merchant_key:
        return merchant_key_from_description(tx.description) == pattern.merchant_key
    if pattern.amount_bucket is not None:
        return amount_bucket(tx.amount) == pattern.amount_bucket
    return False


def score_pattern(pattern: HabitPattern, now: datetime) -> float:
    base = pattern.dow_prob[sunday_first_weekday(now)] if pattern.dow_prob else 0
    return base + INTERVAL_BOOST.get(pattern.interval_type, 0)


def _weekly_due(pattern: HabitPattern, matches: List[Transaction], dow_prob: float, now: datetime) -> bool:
    week_start = start_of_week(now)
    if any(t.date >= week_start for t in matches):
        return False
    if dow_prob < WEEKLY_MIN_DOW_PROB:
        return False
    if minutes_from_midnight(now) < NOON_MIN:
        return False
    if matches:
        # Don't nag well ahead of the usual cadence
        expected = pattern.interval_days_median if pattern.interval_days_median is not None else 7
        if diff_days(now, matches[-1].date) < expected - 1:
            return False
    return True


def _monthly_due(matches: List[Transaction], now: datetime) -> bool:
    month_start = start_of_month(now)
    if any(t.date >= month_start for t in matches):
        return False
    if minutes_from_midnight(now) < NOON_MIN:
        return False

    days_of_month = [t.date.day for t in matches[-MONTHLY_DOM_SAMPLES:]]
    expected_dom = round_half_up(median(days_of_month)) if len(days_of_month) >= 3 else 1
    window_start = clamp(expected_dom - MONTHLY_DAY_TOLERANCE, 1, 31)
    window_end = clamp(expected_dom + MONTHLY_DAY_TOLERANCE, 1, 31)
    return window_start <= now.day <= window_end


def _daily_due(pattern: HabitPattern, dow_prob: float, now: datetime) -> bool:
    if dow_prob < DAILY_MIN_DOW_PROB:
        return False
    now_min = minutes_from_midnight(now)
    if pattern.time_window_start_min is not None and pattern.time_window_end_min is not None:
        return pattern.time_window_start_min <= now_min <= pattern.time_window_end_min + WINDOW_GRACE_MIN
    return now_min >= EVENING_MIN


def _build_candidate(pattern: HabitPattern, score: float) -> HabitReminderCandidate:
    hint = CADENCE_HINTS.get(pattern.interval_type, "today")
    merchant = f" ({pattern.merchant_key})" if pattern.merchant_key else ""
    return HabitReminderCandidate(
        habit_id=pattern.habit_id,
        title="Quick reminder",
        message=f"You usually log {pattern.category}{merchant} around now. Did you miss it {hint}?",
        category=pattern.category,
        description=pattern.merchant_key or pattern.category,
        amount=pattern.amount_median or 0,
        cadence_hint=hint,
        score=score,
    )


def is_reminder_due(
    pattern: HabitPattern,
    transactions: Sequence[Transaction],
    state: Optional[HabitReminderState],
    now: datetime,
) -> bool:
    """
    Evaluate the exclusion gates and the cadence policy for one pattern.

    Gates: inactive, no match criterion, reminded today, snoozed through today,
    or already logged today.
    """
    if not pattern.active:
        return False
    if not pattern.merchant_key and pattern.amount_bucket is None:
        return False

    today = now.date()
    if state is not None:
        if state.last_reminded_date == today:
            return False
        if state.snoozed_until is not None and state.snoozed_until >= today:
            return False

    matches = sorted((t for t in transactions if matches_pattern(t, pattern)), key=lambda t: t.date)
    if any(t.date.date() == today for t in matches):
        return False

    dow_prob = pattern.dow_prob[sunday_first_weekday(now)] if pattern.dow_prob else 0
    if pattern.interval_type == "weekly":
        return _weekly_due(pattern, matches, dow_prob, now)
    if pattern.interval_type == "monthly":
        return _monthly_due(matches, now)
    return _daily_due(pattern, dow_prob, now)


def find_due_habit_reminder(
    patterns: Sequence[HabitPattern],
    transactions: Sequence[Transaction],
    state_by_habit_id: Mapping[str, HabitReminderState],
    now: datetime,
) -> Optional[HabitReminderCandidate]:
    """
    Pick at most one reminder to show.

    Score = today's weekday probability + 0.2 for daily / 0.1 for weekly habits.
    The highest score wins; ties keep the order of `patterns`.
    """
    candidates = [
        _build_candidate(pattern, score_pattern(pattern, now))
        for pattern in patterns
        if is_reminder_due(pattern, transactions, state_by_habit_id.get(pattern.habit_id), now)
    ]
    if not candidates:
        return None
    return sorted(candidates, key=lambda c: c.score, reverse=True)[0]
