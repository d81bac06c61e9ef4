from datetime import time
from typing import Final

DAY_LABELS: Final[tuple[str, ...]] = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)
ORDER_DEADLINE_TIME: Final[time] = time(23, 59, 59, 999000)
MIN_MEAL_POSITION: Final[int] = 1
MAX_MEAL_POSITION: Final[int] = 3
MENU_STATUSES: Final[tuple[str, ...]] = ("draft", "published", "closed", "completed", "archived")
NO_STORE_HEADERS: Final[dict[str, str]] = {"Cache-Control": "no-store"}
