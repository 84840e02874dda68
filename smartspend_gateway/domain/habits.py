"""Habit pattern detection - clusters recurring expenses and describes their cadence"""

import math
import re
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence

from smartspend_gateway.domain.models import TRANSFER_CATEGORIES, HabitPattern, Transaction
from smartspend_gateway.domain.stats import clamp, median, median_absolute_deviation, quantile, round_half_up
from smartspend_gateway.utils.date_utils import diff_days, minutes_from_midnight, sunday_first_weekday

HISTORY_DAYS = 180
SCHEDULE_DAYS = 56
MIN_GROUP_SIZE = 3
MIN_TIME_SAMPLES = 5
MIN_WINDOW_MINUTES = 90
MINUTES_PER_DAY = 24 * 60

# Generic words that say nothing about the payee
STOP_WORDS = frozenset({"buy", "paid", "payment", "fee", "tax", "card", "cash", "for", "to", "at", "in"})

_RECURRING_MARKER = re.compile(r"\(recurring\)")
# Keep latin letters, kana and common CJK ideographs
_NON_WORD = re.compile(r"[^a-z\u3040-\u30ff\u4e00-\u9faf\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    text = _RECURRING_MARKER.sub("", text.lower())
    text = _NON_WORD.sub(" ", text)
    return _WHITESPACE.sub(" ", text).strip()


def merchant_key_from_description(description: str) -> Optional[str]:
    """
    Normalized payee signature: first two meaningful tokens of the description.

    Returns None when fewer than 3 characters survive normalization.
    """
    parts = normalize_text(description or "").split()
    if not parts:
        return None
    filtered = [p for p in parts if p not in STOP_WORDS]
    chosen = " ".join((filtered or parts)[:2])
    return chosen if len(chosen) >= 3 else None


def amount_bucket(amount: float) -> int:
    """Coarse amount used as grouping key when the description has no payee"""
    a = abs(amount)
    if a < 5000:
        step = 100
    elif a < 20000:
        step = 500
    else:
        step = 1000
    return round_half_up(a / step) * step


def _to_base36(n: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    if n == 0:
        return "0"
    out = []
    while n:
        n, r = divmod(n, 36)
        out.append(digits[r])
    return "".join(reversed(out))


def stable_hash(text: str) -> str:
    """
    djb2-style hash over UTF-16 code units, unsigned 32-bit, base36 output.

    Output is part of persisted habit ids and must never change.
    """
    h = 5381
    data = text.encode("utf-16-le")
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        h = ((h * 33) ^ unit) & 0xFFFFFFFF
    return _to_base36(h)


def habit_id_for(category: str, merchant_key: Optional[str], bucket: Optional[int]) -> str:
    parts = [category, merchant_key or "", "" if bucket is None else str(bucket)]
    return stable_hash("|".join(parts))


def grouping_key(tx: Transaction) -> tuple:
    """(merchant_key, amount_bucket) with exactly one of the two set"""
    merchant_key = merchant_key_from_description(tx.description)
    bucket = None if merchant_key else amount_bucket(tx.amount)
    return merchant_key, bucket


def classify_interval(interval_days: Optional[int]) -> str:
    if interval_days is None:
        return "unknown"
    if interval_days <= 2:
        return "daily"
    if abs(interval_days - 7) <= 1:
        return "weekly"
    if abs(interval_days - 30) <= 5:
        return "monthly"
    return "unknown"


def _is_candidate(tx: Transaction, history_cutoff: datetime) -> bool:
    if tx.type != "expense" or tx.category in TRANSFER_CATEGORIES:
        return False
    if not isinstance(tx.date, datetime) or not tx.amount or tx.amount <= 0:
        return False
    return tx.date >= history_cutoff


def _interval_days_median(by_date: Sequence[Transaction]) -> Optional[int]:
    gaps = []
    for prev, cur in zip(by_date, by_date[1:]):
        gap = abs(diff_days(cur.date, prev.date))
        if gap > 0:
            gaps.append(gap)
    return round_half_up(median(gaps)) if gaps else None


def _dow_probabilities(by_date: Sequence[Transaction], schedule_cutoff: datetime, weeks_observed: int) -> List[float]:
    counts = [0] * 7
    for tx in by_date:
        if tx.date < schedule_cutoff:
            continue
        counts[sunday_first_weekday(tx.date)] += 1
    return [clamp(c / weeks_observed, 0, 1) for c in counts]


def _time_window(by_date: Sequence[Transaction], schedule_cutoff: datetime) -> tuple:
    """Interquartile minute-of-day window, widened around the median if under 90 minutes"""
    samples = [
        minutes_from_midnight(tx.created_at)
        for tx in by_date
        if isinstance(tx.created_at, datetime) and tx.created_at >= schedule_cutoff
    ]
    if len(samples) < MIN_TIME_SAMPLES:
        return None, None

    start = round_half_up(quantile(samples, 0.25))
    end = round_half_up(quantile(samples, 0.75))
    if end - start < MIN_WINDOW_MINUTES:
        mid = round_half_up(median(samples))
        start = mid - MIN_WINDOW_MINUTES // 2
        end = mid + MIN_WINDOW_MINUTES // 2
    return int(clamp(start, 0, MINUTES_PER_DAY)), int(clamp(end, 0, MINUTES_PER_DAY))


def build_habit_patterns(transactions: Sequence[Transaction], now: datetime) -> List[HabitPattern]:
    """
    Detect recurring expense habits from transaction history.

    - Only organic expenses (no debt repayments or savings deposits) from the
      last 180 days are considered; non-positive amounts are ignored
    - Transactions group by category plus merchant key, or amount bucket when
      the description yields no merchant key
    - Groups with fewer than 3 transactions are dropped
    - Weekday probabilities and the time-of-day window use the last 56 days only

    Patterns come out in first-seen group order.
    """
    schedule_cutoff = now - timedelta(days=SCHEDULE_DAYS)
    history_cutoff = now - timedelta(days=HISTORY_DAYS)
    weeks_observed = max(1, math.ceil(diff_days(now, schedule_cutoff) / 7))

    groups: Dict[str, List[Transaction]] = {}
    for tx in transactions:
        if not _is_candidate(tx, history_cutoff):
            continue
        merchant_key, bucket = grouping_key(tx)
        groups.setdefault(habit_id_for(tx.category, merchant_key, bucket), []).append(tx)

    patterns = []
    for habit_id, group in groups.items():
        if len(group) < MIN_GROUP_SIZE:
            continue

        by_date = sorted(group, key=lambda t: t.date)
        amounts = [t.amount for t in by_date]
        mad = median_absolute_deviation(amounts)
        interval_days = _interval_days_median(by_date)
        window_start, window_end = _time_window(by_date, schedule_cutoff)

        # Representative fields come from the latest entry, re-derived
        latest = by_date[-1]
        merchant_key, bucket = grouping_key(latest)

        patterns.append(
            HabitPattern(
                habit_id=habit_id,
                category=latest.category,
                merchant_key=merchant_key,
                amount_bucket=bucket,
                amount_median=round_half_up(median(amounts)),
                amount_mad=None if mad is None else round_half_up(mad),
                interval_type=classify_interval(interval_days),
                interval_days_median=interval_days,
                dow_prob=_dow_probabilities(by_date, schedule_cutoff, weeks_observed),
                time_window_start_min=window_start,
                time_window_end_min=window_end,
                active=True,
                updated_at=now,
            )
        )

    return patterns
