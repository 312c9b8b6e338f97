"""Unit tests for the menu provider and its static fallback."""

import time

import pytest

from app.schemas import MenuType
from app.services.llm.base import LLMServiceError
from app.services.llm.mock import MockChatService
from app.services.menu.provider import LIVE_MENU_SIZE, MENU_USER_PROMPT, MenuProvider


@pytest.mark.unit
class TestStaticMenu:
    """Tests for the fixed catalog."""

    def test_static_menu_has_eight_items(self, make_chat) -> None:
        provider = MenuProvider(make_chat())

        menu = provider.get_static_menu()

        assert len(menu) == 8
        assert [item.id for item in menu] == list(range(1, 9))

    def test_static_menu_is_deterministic(self, make_chat) -> None:
        provider = MenuProvider(make_chat())

        assert provider.get_static_menu() == provider.get_static_menu()

    def test_static_menu_returns_a_copy(self, make_chat) -> None:
        """Test that callers cannot mutate the catalog."""
        provider = MenuProvider(make_chat())

        provider.get_static_menu().clear()

        assert len(provider.get_static_menu()) == 8


@pytest.mark.unit
class TestLiveMenu:
    """Tests for LLM-generated menus."""

    @pytest.mark.asyncio
    async def test_unconfigured_provider_serves_static_menu(self, make_chat, static_menu) -> None:
        """Test that no credential means no call and the static menu."""
        chat = make_chat(configured=False)
        provider = MenuProvider(chat)

        menu = await provider.get_live_menu()

        assert menu == static_menu
        assert chat.calls == []

    @pytest.mark.asyncio
    async def test_generated_menu_is_parsed(self) -> None:
        provider = MenuProvider(MockChatService())

        menu = await provider.get_live_menu()

        assert len(menu) == LIVE_MENU_SIZE
        assert menu[0].name == "Dragon Roll"
        assert all(item.price > 0 for item in menu)

    @pytest.mark.asyncio
    async def test_prompt_asks_for_json_array(self, make_chat) -> None:
        chat = make_chat(reply='[{"id": 1, "name": "Roll", "price": 5}]')
        provider = MenuProvider(chat)

        await provider.get_live_menu()

        assert chat.calls[0][0].role == "system"
        assert chat.calls[0][1].content == MENU_USER_PROMPT

    @pytest.mark.asyncio
    async def test_short_menu_is_still_served(self, make_chat) -> None:
        """Test that a menu with fewer items than requested is kept."""
        provider = MenuProvider(make_chat(reply='[{"id": 1, "name": "Roll", "price": 5}]'))

        menu = await provider.get_live_menu()

        assert [item.name for item in menu] == ["Roll"]

    @pytest.mark.asyncio
    async def test_timeout_falls_back_within_bound(self, make_chat, static_menu) -> None:
        """Test that a slow provider is abandoned after the timeout."""
        provider = MenuProvider(make_chat(delay=5.0), timeout_seconds=0.05)

        start = time.perf_counter()
        menu = await provider.get_live_menu()
        elapsed = time.perf_counter() - start

        assert menu == static_menu
        assert elapsed < 2.0

    @pytest.mark.asyncio
    async def test_provider_error_falls_back(self, make_chat, static_menu) -> None:
        provider = MenuProvider(make_chat(error=LLMServiceError("rate limited")))

        assert await provider.get_live_menu() == static_menu

    @pytest.mark.asyncio
    async def test_reply_without_json_falls_back(self, make_chat, static_menu) -> None:
        provider = MenuProvider(make_chat(reply="Sorry, I can't generate a menu right now."))

        assert await provider.get_live_menu() == static_menu

    @pytest.mark.asyncio
    async def test_invalid_entries_fall_back(self, make_chat, static_menu) -> None:
        """Test that entries failing validation reject the whole reply."""
        reply = '[{"id": 1, "name": "Roll", "price": -3}, {"id": 2, "name": "Soup", "price": 4}]'
        provider = MenuProvider(make_chat(reply=reply))

        assert await provider.get_live_menu() == static_menu

    @pytest.mark.asyncio
    async def test_strict_mode_rejects_malformed_json(self, make_chat, static_menu) -> None:
        reply = '[{"id": 1, "name": "Roll", "price": 5,}]'

        lenient = await MenuProvider(make_chat(reply=reply)).get_live_menu()
        strict = await MenuProvider(make_chat(reply=reply), strict_json=True).get_live_menu()

        assert [item.name for item in lenient] == ["Roll"]
        assert strict == static_menu

    @pytest.mark.asyncio
    async def test_load_live_menu_reports_source(self, make_chat) -> None:
        generated, generated_source = await MenuProvider(MockChatService()).load_live_menu()
        fallback, fallback_source = await MenuProvider(make_chat(reply="no JSON here")).load_live_menu()

        assert generated_source == MenuType.LIVE
        assert generated[0].name == "Dragon Roll"
        assert fallback_source == MenuType.STATIC
        assert len(fallback) == 8
