"""
Menu Provider

Produces the menu served to clients, either the static catalog or a menu
generated by one LLM completion.

Failure policy (fallback): a missing credential, a timeout, a provider error,
unparseable JSON or entries that fail validation all return the static
catalog. ``get_live_menu`` never raises.
"""

import asyncio
import logging
import time

from app.schemas import MenuItem, MenuType
from app.services.llm.base import BaseChatService, ChatMessage
from app.services.menu.catalog import STATIC_MENU
from app.services.menu.parsing import parse_menu_json

logger = logging.getLogger(__name__)


LIVE_MENU_SIZE = 8

MENU_SYSTEM_PROMPT = (
    "You are a helpful assistant for a Japanese sushi restaurant. "
    f"Generate a menu with exactly {LIVE_MENU_SIZE} items in valid JSON format."
)

MENU_USER_PROMPT = f"""Generate a restaurant menu with {LIVE_MENU_SIZE} Japanese/sushi items. Return ONLY a valid JSON array with this exact structure:
[
  {{
    "id": 1,
    "name": "Item Name",
    "description": "Brief description",
    "price": 9.99,
    "image": "https://images.unsplash.com/photo-relevant-food?w=400&h=300&fit=crop"
  }}
]

Use real Unsplash image URLs for food photos. Make prices realistic ($3-$20). Include variety: rolls, nigiri, appetizers, and entrees."""


class MenuProvider:
    """
    Source of menu items for the API.

    Attributes:
        timeout_seconds: Upper bound on the live menu completion
        strict_json: Parse the model's JSON as-is (no repair pass)
    """

    def __init__(
        self,
        chat: BaseChatService,
        timeout_seconds: float = 30.0,
        max_tokens: int = 1500,
        temperature: float = 0.7,
        strict_json: bool = False,
        enable_performance_logging: bool = False,
    ):
        self._chat = chat
        self.timeout_seconds = timeout_seconds
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.strict_json = strict_json
        self._perf = enable_performance_logging

    def get_static_menu(self) -> list[MenuItem]:
        """The fixed catalog; deterministic and network-independent."""
        return list(STATIC_MENU)

    def parse_menu(self, content: str) -> list[MenuItem]:
        """
        Turn an LLM reply into validated menu items.

        Raises:
            MenuParseError: The reply holds no usable JSON array
            pydantic.ValidationError: An entry is not a valid MenuItem
        """
        entries = parse_menu_json(content, strict=self.strict_json)
        return [MenuItem.model_validate(entry) for entry in entries]

    async def get_live_menu(self) -> list[MenuItem]:
        """Ask the LLM for a fresh menu, falling back to the static catalog."""
        items, _ = await self.load_live_menu()
        return items

    async def load_live_menu(self) -> tuple[list[MenuItem], MenuType]:
        """
        Like ``get_live_menu`` but also reports which menu was served.

        Returns:
            tuple: Items and ``MenuType.LIVE``, or the static catalog and
                ``MenuType.STATIC`` after a fallback
        """
        if not self._chat.is_configured:
            logger.info("ℹ️  Using static menu (LLM provider not configured)")
            return self.get_static_menu(), MenuType.STATIC

        messages = [
            ChatMessage("system", MENU_SYSTEM_PROMPT),
            ChatMessage("user", MENU_USER_PROMPT),
        ]

        logger.info(f"🤖 Calling {self._chat.provider_name} to generate menu...")
        start = time.perf_counter()
        try:
            content = await asyncio.wait_for(
                self._chat.complete(
                    messages,
                    max_tokens=self.max_tokens,
                    temperature=self.temperature,
                ),
                timeout=self.timeout_seconds,
            )
            if self._perf:
                logger.info(f"⏱️  LLM menu response time: {(time.perf_counter() - start) * 1000:.0f}ms")

            items = self.parse_menu(content)
            if len(items) != LIVE_MENU_SIZE:
                logger.warning(f"LLM returned {len(items)} menu items (asked for {LIVE_MENU_SIZE})")

            logger.info(f"✅ Generated menu from LLM ({len(items)} items)")
            return items, MenuType.LIVE

        except asyncio.TimeoutError:
            logger.error(f"❌ LLM menu request timed out after {self.timeout_seconds}s")
        except Exception as e:
            logger.error(f"❌ Error fetching menu from LLM: {type(e).__name__}: {e}")

        logger.info("ℹ️  Falling back to static menu")
        return self.get_static_menu(), MenuType.STATIC
