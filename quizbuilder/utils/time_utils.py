from datetime import datetime
from typing import Optional
import pytz
from quizbuilder.config import settings

def get_local_timezone():
    """Timezone used for 'now' and for timestamps stored without an offset"""
    return pytz.timezone(settings.timezone)

def now():
    """Get current time in the configured timezone"""
    return datetime.now(get_local_timezone())

def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO timestamp ('Z' suffix allowed); naive values are taken as local time"""
    if not value:
        return None
    parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    if parsed.tzinfo is None:
        return get_local_timezone().localize(parsed)
    return parsed

def format_time_for_display(dt):
    """Format datetime for display"""
    return dt.strftime("%Y-%m-%d %H:%M:%S")
