from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from ..core.config import settings

TZ = ZoneInfo(settings.timezone)

def today_key(reset_hour: int = settings.day_reset_hour, now: datetime | None = None) -> str:
    now = (now or datetime.now(TZ)).astimezone(TZ)
    if now.hour < reset_hour:
        now = now - timedelta(days=1)
    return now.date().isoformat()  # "YYYY-MM-DD"
