from datetime import datetime, timedelta, timezone


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def last_24h_start() -> datetime:
    return now_utc() - timedelta(days=1)
