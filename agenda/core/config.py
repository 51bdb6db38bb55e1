import os
from datetime import tzinfo

from dateutil import tz as dateutil_tz
from pydantic import BaseModel


class AppConfig(BaseModel):
    display_timezone: str = "UTC"
    booked_slots_shown: int = 3
    log_level: str = "INFO"

    def display_tz(self) -> tzinfo:
        """Resolve the display timezone, falling back to UTC for unknown names."""
        return dateutil_tz.gettz(self.display_timezone) or dateutil_tz.UTC


def load_config() -> AppConfig:
    shown_str = os.getenv("AGENDA_BOOKED_SLOTS_SHOWN", "3")
    shown = max(1, int(shown_str)) if shown_str.isdigit() else 3
    return AppConfig(
        display_timezone=os.getenv("AGENDA_DISPLAY_TIMEZONE", "UTC"),
        booked_slots_shown=shown,
        log_level=os.getenv("AGENDA_LOG_LEVEL", "INFO").upper(),
    )
