"""
# @Time    : 2026/10/19
# @Author  : Pedro
# @File    : timeutil.py
# @Software: PyCharm
"""
from datetime import date, datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def today_of(now: datetime | date) -> date:
    """expiryDate 按天比较"""
    if isinstance(now, datetime):
        return now.date()
    return now


def iso_now(clock: Clock = utc_now) -> str:
    return clock().isoformat()
