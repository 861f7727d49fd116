from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from settings import TZ


def get_current_time_in_timezone(timezone_str: str = TZ) -> datetime:
    """Get Current Time in Specified Timezone

    Args:
        timezone_str (str): Timezone string (e.g., "America/Caracas")

    Returns:
        datetime: Current datetime in the specified timezone
    """
    try:
        tz = ZoneInfo(timezone_str)
    except ZoneInfoNotFoundError:
        tz = ZoneInfo("UTC")
    return datetime.now(tz)


def get_start_of_day(value: datetime) -> datetime:
    return value.replace(hour=0, minute=0, second=0, microsecond=0)
