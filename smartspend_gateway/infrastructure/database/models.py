"""SQLAlchemy ORM models for habit patterns and reminder state"""

from sqlalchemy import Boolean, Column, Date, DateTime, Integer, JSON, Text
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class HabitPatternRecord(Base):
    """Detected habit pattern, one row per habit id"""

    __tablename__ = "habit_patterns"

    habit_id = Column(Text, primary_key=True)
    category = Column(Text, nullable=False)
    merchant_key = Column(Text, nullable=True)
    amount_bucket = Column(Integer, nullable=True)
    amount_median = Column(Integer, nullable=False)
    amount_mad = Column(Integer, nullable=True)
    interval_type = Column(Text, nullable=False)
    interval_days_median = Column(Integer, nullable=True)
    dow_prob = Column(JSON, nullable=False)
    time_start_min = Column(Integer, nullable=True)
    time_end_min = Column(Integer, nullable=True)
    active = Column(Boolean, nullable=False, default=True)
    updated_at = Column(DateTime, nullable=False)


class HabitReminderStateRecord(Base):
    """Per-habit reminder bookkeeping"""

    __tablename__ = "habit_reminder_state"

    habit_id = Column(Text, primary_key=True)
    last_reminded_date = Column(Date, nullable=True)
    snoozed_until = Column(Date, nullable=True)
    dismiss_count_recent = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
