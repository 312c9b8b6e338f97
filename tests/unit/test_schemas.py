"""Unit tests for request and menu schemas."""

import pytest
from pydantic import ValidationError

from app.schemas import ChatResponse, MenuItem, OrderCreate, OrderItemCreate


def order_payload(**overrides) -> dict:
    payload = {
        "firstName": "Jane",
        "lastName": "Doe",
        "phone": "(555) 123-4567",
        "creditCard": "4242 4242 4242 4242",
        "items": [
            {"name": "Caesar Salad", "price": 9.99, "quantity": 2},
            {"name": "Fish Tacos", "price": 12.99, "quantity": 1},
        ],
        "totalPrice": 32.97,
    }
    payload.update(overrides)
    return payload


@pytest.mark.unit
class TestOrderCreate:
    """Tests for order submission validation."""

    def test_valid_order(self) -> None:
        order = OrderCreate.model_validate(order_payload())

        assert order.first_name == "Jane"
        assert order.credit_card == "4242424242424242"
        assert order.computed_total == 32.97
        assert [item.subtotal for item in order.items] == [19.98, 12.99]

    @pytest.mark.parametrize("quantity", [0, 10, -1])
    def test_quantity_out_of_range_rejected(self, quantity: int) -> None:
        items = [{"name": "Caesar Salad", "price": 9.99, "quantity": quantity}]

        with pytest.raises(ValidationError):
            OrderCreate.model_validate(order_payload(items=items, totalPrice=9.99))

    @pytest.mark.parametrize("quantity", [1, 9])
    def test_quantity_bounds_accepted(self, quantity: int) -> None:
        item = OrderItemCreate(name="Caesar Salad", price=10.0, quantity=quantity)

        assert item.subtotal == 10.0 * quantity

    @pytest.mark.parametrize("price", [0.004, 0.001])
    def test_item_price_rounding_to_zero_rejected(self, price: float) -> None:
        with pytest.raises(ValidationError, match="Price must be at least 0.01"):
            OrderItemCreate(name="Free Sample", price=price, quantity=1)

    def test_item_price_rounded_to_cents(self) -> None:
        item = OrderItemCreate(name="Caesar Salad", price=9.994, quantity=3)

        assert item.price == 9.99
        assert item.subtotal == 29.97

    def test_empty_items_rejected(self) -> None:
        with pytest.raises(ValidationError):
            OrderCreate.model_validate(order_payload(items=[]))

    def test_blank_item_name_rejected(self) -> None:
        with pytest.raises(ValidationError):
            OrderItemCreate(name="   ", price=5.0, quantity=1)

    @pytest.mark.parametrize("phone", ["555-1234", "555 123 45678", ""])
    def test_invalid_phone_rejected(self, phone: str) -> None:
        with pytest.raises(ValidationError, match="Phone number must be 10 digits"):
            OrderCreate.model_validate(order_payload(phone=phone))

    @pytest.mark.parametrize("card", ["4242 4242 424", "4242-4242-4242-4242-42"])
    def test_invalid_card_rejected(self, card: str) -> None:
        with pytest.raises(ValidationError):
            OrderCreate.model_validate(order_payload(creditCard=card))

    def test_total_mismatch_rejected(self) -> None:
        with pytest.raises(ValidationError, match="does not match item total"):
            OrderCreate.model_validate(order_payload(totalPrice=30.00))

    def test_total_within_a_cent_accepted(self) -> None:
        order = OrderCreate.model_validate(order_payload(totalPrice=32.98))

        assert order.computed_total == 32.97

    def test_snake_case_field_names_accepted(self) -> None:
        payload = order_payload()
        payload["first_name"] = payload.pop("firstName")

        assert OrderCreate.model_validate(payload).first_name == "Jane"


@pytest.mark.unit
class TestMenuItem:
    """Tests for menu item normalization."""

    def test_price_rounded_to_cents(self) -> None:
        assert MenuItem(id=1, name="Roll", price=5.999).price == 6.0

    @pytest.mark.parametrize("price", [0, -2.5])
    def test_non_positive_price_rejected(self, price: float) -> None:
        with pytest.raises(ValidationError):
            MenuItem(id=1, name="Roll", price=price)

    @pytest.mark.parametrize("price", [0.004, 0.0049])
    def test_price_rounding_to_zero_rejected(self, price: float) -> None:
        with pytest.raises(ValidationError, match="Price must be at least 0.01"):
            MenuItem(id=1, name="Roll", price=price)

    def test_smallest_price_accepted(self) -> None:
        assert MenuItem(id=1, name="Roll", price=0.006).price == 0.01

    def test_dietary_tags_normalized(self) -> None:
        item = MenuItem(id=1, name="Salad", price=8.0, dietary=["Vegan", " vegetarian", "vegan"])

        assert item.dietary == ["vegan", "vegetarian"]

    def test_dietary_accepts_comma_string(self) -> None:
        item = MenuItem(id=1, name="Salad", price=8.0, dietary="Vegan, Gluten-Free")

        assert item.dietary == ["vegan", "gluten-free"]

    def test_spice_level_alias(self) -> None:
        item = MenuItem.model_validate({"id": "a1", "name": "Curry", "price": 12, "spiceLevel": 2})

        assert item.spice_level == 2
        assert item.model_dump(by_alias=True)["spiceLevel"] == 2

    def test_spice_level_out_of_range_rejected(self) -> None:
        with pytest.raises(ValidationError):
            MenuItem.model_validate({"id": 1, "name": "Curry", "price": 12, "spiceLevel": 4})


@pytest.mark.unit
class TestChatResponse:
    def test_serializes_camel_case(self) -> None:
        response = ChatResponse(response="Hi", tools_used=[])

        assert response.model_dump(by_alias=True) == {"response": "Hi", "toolsUsed": []}
