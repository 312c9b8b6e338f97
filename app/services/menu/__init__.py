"""
Menu Services

    - catalog: the fixed static menu
    - parsing: JSON extraction from LLM replies
    - provider: static / live menu selection with fallback
"""

from app.services.menu.catalog import STATIC_MENU
from app.services.menu.parsing import MenuParseError, extract_json_block, normalize_json, parse_menu_json
from app.services.menu.provider import LIVE_MENU_SIZE, MenuProvider

__all__ = [
    "STATIC_MENU",
    "LIVE_MENU_SIZE",
    "MenuParseError",
    "MenuProvider",
    "extract_json_block",
    "normalize_json",
    "parse_menu_json",
]
