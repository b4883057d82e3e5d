from datetime import date, datetime
import time

import pytz

DEFAULT_TZ = pytz.utc

def now_in(tz=None) -> datetime:
    return datetime.now(tz or DEFAULT_TZ)

def today_in(tz=None) -> date:
    return now_in(tz).date()

def now_millis() -> int:
    return int(time.time() * 1000)

def to_millis(dt: datetime) -> int:
    return int(dt.timestamp() * 1000)
