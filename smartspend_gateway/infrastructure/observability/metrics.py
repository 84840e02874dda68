"""Prometheus metrics for payoff simulations, habit detection and reminders"""

from typing import Optional

from prometheus_client import Counter, Histogram

# Simulation metrics
simulation_counter = Counter(
    "smartspend_simulation_total",
    "Total debt payoff simulations run",
    ["outcome"],  # ok | configuration | divergence
)

simulation_months_histogram = Histogram(
    "smartspend_simulation_months",
    "Projected months to debt freedom",
    buckets=[6, 12, 24, 36, 60, 120, 240, 600],
)

# Habit metrics
habit_patterns_counter = Counter(
    "smartspend_habit_patterns_detected_total",
    "Habit patterns emitted by detection runs",
)

skipped_transactions_counter = Counter(
    "smartspend_transactions_skipped_total",
    "Malformed transactions ignored during intake",
)

reminder_counter = Counter(
    "smartspend_reminder_evaluations_total",
    "Reminder evaluations by outcome",
    ["outcome"],  # due | none
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_simulation(months: Optional[int], warning: Optional[str], monthly_budget: float) -> None:
    """Record simulation outcome; budget <= 0 means the configuration warning fired"""
    if warning is None:
        simulation_counter.labels(outcome="ok").inc()
        if months is not None:
            simulation_months_histogram.observe(months)
    elif monthly_budget <= 0:
        simulation_counter.labels(outcome="configuration").inc()
    else:
        simulation_counter.labels(outcome="divergence").inc()


def record_reminder(habit_id: Optional[str]) -> None:
    reminder_counter.labels(outcome="due" if habit_id else "none").inc()
