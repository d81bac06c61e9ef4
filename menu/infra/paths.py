from pathlib import Path

from menu.utilities.config import MENU_DATA_FILE

# Centralized paths for data files (single source of truth)
DATA_DIR = (Path(__file__).parent.parent / 'data').resolve()
SEED_FILE = DATA_DIR / 'seed_menus.json'

__all__ = ['DATA_DIR', 'MENU_DATA_FILE', 'SEED_FILE']
