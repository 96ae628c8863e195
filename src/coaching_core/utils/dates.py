"""Date helpers shared by the refund, discount and transfer rules.

All day counts in the core use the same convention: whole days between two
instants, rounded down. A session 10 days and 23 hours away is 10 days away.
"""

import datetime as dt

ONE_DAY = dt.timedelta(days=1)


def to_datetime(value: dt.date | dt.datetime, tzinfo: dt.tzinfo | None = None) -> dt.datetime:
    """Normalise a date or datetime to a datetime.

    Plain dates become midnight. Naive values take ``tzinfo`` when given so
    they can be compared with aware ones.
    """
    if not isinstance(value, dt.datetime):
        value = dt.datetime.combine(value, dt.time.min)
    if value.tzinfo is None and tzinfo is not None:
        value = value.replace(tzinfo=tzinfo)
    return value


def whole_days_until(target: dt.date | dt.datetime, now: dt.date | dt.datetime) -> int:
    """Whole days from ``now`` until ``target``, floored (negative when past)."""
    now_dt = to_datetime(now)
    target_dt = to_datetime(target, now_dt.tzinfo)
    if now_dt.tzinfo is None and target_dt.tzinfo is not None:
        now_dt = now_dt.replace(tzinfo=target_dt.tzinfo)
    return (target_dt - now_dt) // ONE_DAY


def has_passed(moment: dt.date | dt.datetime, now: dt.date | dt.datetime) -> bool:
    """True when ``moment`` lies strictly before ``now``."""
    now_dt = to_datetime(now)
    moment_dt = to_datetime(moment, now_dt.tzinfo)
    if now_dt.tzinfo is None and moment_dt.tzinfo is not None:
        now_dt = now_dt.replace(tzinfo=moment_dt.tzinfo)
    return moment_dt < now_dt
