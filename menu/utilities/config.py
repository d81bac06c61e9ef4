"""Configuration management for the Weekly Menu service."""
import os
from datetime import date
from typing import Final, Optional
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file if it exists
env_path = Path(__file__).parent.parent.parent / '.env'
if env_path.exists():
    load_dotenv(env_path)

# Application Settings
APP_HOST: Final[str] = os.getenv('APP_HOST', '0.0.0.0')
APP_PORT: Final[int] = int(os.getenv('APP_PORT', '8000'))
DEBUG: Final[bool] = os.getenv('DEBUG', 'False').lower() == 'true'
LOG_LEVEL: Final[str] = os.getenv('LOG_LEVEL', 'INFO').upper()

# Admin access (empty -> admin routes are open, meant for local development)
ADMIN_API_TOKEN: Final[Optional[str]] = os.getenv('ADMIN_API_TOKEN') or None

# Schedule
MENU_TIMEZONE: Final[str] = os.getenv('MENU_TIMEZONE', 'UTC')
ROTATION_LENGTH: Final[int] = int(os.getenv('ROTATION_LENGTH', '4'))
ROTATION_MODE: Final[str] = os.getenv('ROTATION_MODE', 'day_of_year')
ROTATION_EPOCH: Final[date] = date.fromisoformat(os.getenv('ROTATION_EPOCH', '2025-01-05'))
WEEK_START_WEEKDAY: Final[int] = int(os.getenv('WEEK_START_WEEKDAY', '6'))  # Python weekday, 6 = Sunday
ORDER_DEADLINE_OFFSET_DAYS: Final[int] = int(os.getenv('ORDER_DEADLINE_OFFSET_DAYS', '3'))
DELIVERY_OFFSET_DAYS: Final[int] = int(os.getenv('DELIVERY_OFFSET_DAYS', '6'))

# Public menu cache / rate limiting
MENU_CACHE_TTL_SECONDS: Final[int] = int(os.getenv('MENU_CACHE_TTL_SECONDS', '300'))
RATE_LIMIT_MAX: Final[int] = int(os.getenv('RATE_LIMIT_MAX', '60'))
RATE_LIMIT_WINDOW_SECONDS: Final[float] = float(os.getenv('RATE_LIMIT_WINDOW_SECONDS', '60'))

# File Paths
BASE_DIR: Final[Path] = Path(__file__).parent.parent
DATA_DIR: Final[Path] = BASE_DIR / 'data'
MENU_DATA_FILE: Final[Path] = Path(os.getenv('MENU_DATA_FILE', str(DATA_DIR / 'menus.json')))
