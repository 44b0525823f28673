"""Tests for the order session."""

import asyncio
from decimal import Decimal

import pytest

from cafe import catalog
from cafe.errors import (
    EmptyCartError,
    InvalidTransitionError,
    MissingContactError,
    OrderPlacementError,
    ValidationError,
)
from cafe.models import (
    CheckoutDetails,
    ContactInfo,
    Customization,
    Order,
    OrderStatus,
    PaymentMethod,
    Preferences,
    Size,
)
from cafe.session import OrderSession, OrderStage


DETAILS = CheckoutDetails(contact=ContactInfo("Ava", "+971500000000"), payment_method=PaymentMethod.CASH)


async def ready_for_checkout(session, location_id="difc", item_id=3, quantity=1):
    await session.select_location(catalog.get_location(location_id))
    session.add_to_cart(item_id, Customization(size=Size.REGULAR), quantity)
    session.review_cart()
    return session.begin_checkout()


class TestStart:
    async def test_loads_profile(self, session):
        assert session.loaded
        assert session.profile.stars == 7
        assert session.profile.preferences.milk == "Oat"
        assert session.profile.favorites == [2]

    async def test_missing_profile_uses_defaults(self, memory_store):
        session = OrderSession("new", "new@example.com", memory_store, memory_store)
        profile = await session.start()

        assert profile.has_completed_onboarding is False
        assert profile.stars == 0
        assert profile.favorites == []
        assert profile.preferred_location is None

    async def test_load_failure_falls_back_to_defaults(self, memory_store):
        memory_store.profiles["u1"] = {"stars": 40, "hasCompletedOnboarding": True}
        memory_store.fail_load = True
        session = OrderSession("u1", "ava@example.com", memory_store, memory_store)

        profile = await session.start()

        assert session.loaded
        assert profile.stars == 0
        assert profile.has_completed_onboarding is False


class TestProfileEdits:
    async def test_complete_onboarding_persists(self, memory_store):
        session = OrderSession("u2", "bo@example.com", memory_store, memory_store)
        await session.start()

        await session.complete_onboarding(Preferences("Almond", "Vegetarian", ["Soy"]))

        stored = memory_store.profiles["u2"]
        assert stored["hasCompletedOnboarding"] is True
        assert stored["preferences"] == {"milk": "Almond", "diet": "Vegetarian", "allergies": ["Soy"]}
        assert session.profile.has_completed_onboarding

    async def test_toggle_favorite_twice_restores_set(self, session, memory_store):
        original = list(session.profile.favorites)

        assert await session.toggle_favorite(5) is True
        assert 5 in memory_store.profiles["u1"]["favorites"]
        assert await session.toggle_favorite(5) is False

        assert session.profile.favorites == original
        assert memory_store.profiles["u1"]["favorites"] == original

    async def test_favorite_save_failure_keeps_local_state(self, session, memory_store):
        memory_store.fail_save = True

        assert await session.toggle_favorite(6) is True

        assert 6 in session.profile.favorites
        assert session.last_sync_ok is False

    async def test_first_selected_location_becomes_preferred(self, session, memory_store):
        await session.select_location(catalog.get_location("jbr"))
        await session.select_location(catalog.get_location("difc"))

        assert session.selected_location.id == "difc"
        assert session.profile.preferred_location.id == "jbr"
        assert memory_store.profiles["u1"]["preferredLocation"]["id"] == "jbr"

    async def test_explicit_preferred_location_override(self, session):
        await session.select_location(catalog.get_location("jbr"))
        await session.set_preferred_location(catalog.get_location("downtown"))
        assert session.profile.preferred_location.id == "downtown"


class TestCustomization:
    async def test_customize_then_confirm_returns_to_browsing(self, session):
        item = session.begin_customization(1)
        assert item.name == "Espresso"
        assert session.stage == OrderStage.ITEM_CUSTOMIZATION

        line = session.confirm_customization(Customization(size=Size.LARGE), quantity=2)

        assert session.stage == OrderStage.BROWSING
        assert line.price == Decimal("30")
        assert len(session.cart) == 1

    async def test_default_customization_uses_profile_milk(self, session):
        session.begin_customization(2)
        line = session.confirm_customization()
        assert line.customization.milk == "Oat"
        assert line.customization.size == Size.REGULAR

    async def test_unsized_items_ignore_size_and_milk(self, session):
        croissant = session.add_to_cart(11, Customization(size=Size.LARGE, milk="Oat"))
        toast = session.add_to_cart(8, Customization(size=Size.SMALL))

        assert croissant.customization.size is None
        assert croissant.customization.milk == ""
        assert croissant.unit_price == Decimal("15")
        assert toast.unit_price == Decimal("35")

    async def test_default_customization_for_food_has_no_milk(self, session):
        customization = session.default_customization(catalog.get_item(9))
        assert customization.size is None
        assert customization.milk == ""

    async def test_confirm_without_customizing_is_rejected(self, session):
        with pytest.raises(InvalidTransitionError):
            session.confirm_customization()

    async def test_cancel_customization(self, session):
        session.begin_customization(1)
        session.cancel_customization()
        assert session.stage == OrderStage.BROWSING
        assert session.cart.is_empty


class TestCheckout:
    async def test_begin_checkout_requires_items(self, session):
        await session.select_location(catalog.get_location("difc"))
        session.review_cart()
        with pytest.raises(EmptyCartError):
            session.begin_checkout()

    async def test_begin_checkout_requires_location(self, session):
        session.add_to_cart(3)
        session.review_cart()
        with pytest.raises(ValidationError):
            session.begin_checkout()

    async def test_begin_checkout_returns_total(self, session):
        total = await ready_for_checkout(session, quantity=2)
        assert total == Decimal("42.00")
        assert session.stage == OrderStage.CHECKOUT

    async def test_place_order_success(self, session, memory_store):
        await ready_for_checkout(session, item_id=9, quantity=1)

        order = await session.place_order(DETAILS)

        assert order.id == "order-1"
        assert order.order_number.startswith("BC")
        assert order.status == OrderStatus.CONFIRMED
        assert order.total == Decimal("44.10")
        assert order.stars_earned == 4
        assert session.cart.is_empty
        assert session.current_order is order
        assert session.orders == [order]
        assert session.profile.stars == 11
        assert memory_store.profiles["u1"]["stars"] == 11
        assert session.stage == OrderStage.CONFIRMED

        record = memory_store.orders[0]
        assert record["userId"] == "u1"
        assert record["status"] == "placed"
        assert record["paymentMethod"] == "cash"
        assert record["contactInfo"] == {"name": "Ava", "phone": "+971500000000"}
        assert record["pickupTime"] == "ASAP"

    async def test_order_total_frozen_at_creation(self, session):
        await ready_for_checkout(session, quantity=1)
        order = await session.place_order(DETAILS)

        session.acknowledge_order()
        session.add_to_cart(9, quantity=3)

        assert len(order.items) == 1
        assert order.total == order.subtotal + order.tax

    async def test_place_order_with_empty_cart_makes_no_calls(self, session, memory_store):
        memory_store.calls.clear()
        with pytest.raises(EmptyCartError):
            await session.place_order(DETAILS)
        assert memory_store.calls == []

    async def test_missing_contact_blocks_order(self, session, memory_store):
        await ready_for_checkout(session)
        memory_store.calls.clear()

        with pytest.raises(MissingContactError) as excinfo:
            await session.place_order(CheckoutDetails(contact=ContactInfo("", " ")))

        assert excinfo.value.fields == ["name", "phone"]
        assert memory_store.calls == []
        assert not session.cart.is_empty

    async def test_order_write_failure_leaves_state_untouched(self, session, memory_store):
        await ready_for_checkout(session, quantity=2)
        memory_store.fail_order = True

        with pytest.raises(OrderPlacementError):
            await session.place_order(DETAILS)

        assert session.profile.stars == 7
        assert session.orders == []
        assert session.current_order is None
        assert len(session.cart) == 1
        assert session.stage == OrderStage.CHECKOUT

    async def test_overlapping_place_order_creates_one_order(self, session, memory_store):
        await ready_for_checkout(session, item_id=9)
        memory_store.order_delay = 0.05

        results = await asyncio.gather(
            session.place_order(DETAILS),
            session.place_order(DETAILS),
            return_exceptions=True,
        )

        placed = [result for result in results if isinstance(result, Order)]
        rejected = [result for result in results if isinstance(result, InvalidTransitionError)]
        assert len(placed) == 1
        assert len(rejected) == 1
        assert len(memory_store.orders) == 1
        assert session.orders == placed
        assert session.profile.stars == 11

    async def test_cart_is_locked_while_order_is_written(self, session, memory_store):
        await ready_for_checkout(session)
        line_id = session.cart.lines[0].line_id
        memory_store.order_delay = 0.05

        pending = asyncio.ensure_future(session.place_order(DETAILS))
        await asyncio.sleep(0)

        assert session.stage == OrderStage.PLACING
        with pytest.raises(InvalidTransitionError):
            session.update_quantity(line_id, 5)
        with pytest.raises(InvalidTransitionError):
            session.add_to_cart(1)

        order = await pending
        assert order.items[0].quantity == 1
        assert session.stage == OrderStage.CONFIRMED

    async def test_failed_write_allows_retry(self, session, memory_store):
        await ready_for_checkout(session)
        memory_store.fail_order = True
        with pytest.raises(OrderPlacementError):
            await session.place_order(DETAILS)

        memory_store.fail_order = False
        order = await session.place_order(DETAILS)

        assert order.status == OrderStatus.CONFIRMED
        assert len(memory_store.orders) == 1

    async def test_profile_save_failure_does_not_fail_order(self, session, memory_store):
        await ready_for_checkout(session, item_id=9)
        memory_store.fail_save = True

        order = await session.place_order(DETAILS)

        assert order.stars_earned == 4
        assert session.profile.stars == 11
        assert session.last_sync_ok is False

    async def test_first_order_sets_preferred_location(self, memory_store):
        session = OrderSession("u3", "cy@example.com", memory_store, memory_store)
        await session.start()
        session.selected_location = catalog.get_location("downtown")
        session.add_to_cart(1)
        session.review_cart()
        session.begin_checkout()

        await session.place_order(DETAILS)

        assert session.profile.preferred_location.id == "downtown"
        assert memory_store.profiles["u3"]["preferredLocation"]["id"] == "downtown"

    async def test_second_order_keeps_preferred_location(self, session):
        await ready_for_checkout(session, location_id="jbr")
        await session.place_order(DETAILS)
        session.acknowledge_order()

        await session.select_location(catalog.get_location("difc"))
        session.add_to_cart(4)
        session.review_cart()
        session.begin_checkout()
        second = await session.place_order(DETAILS)

        assert second.location.id == "difc"
        assert session.profile.preferred_location.id == "jbr"
        assert len(session.orders) == 2

    async def test_scheduled_pickup_time(self, session):
        await ready_for_checkout(session)
        order = await session.place_order(
            CheckoutDetails(contact=ContactInfo("Ava", "050"), pickup_time="14:30")
        )
        assert order.pickup_time == "14:30"

    async def test_acknowledge_requires_confirmed(self, session):
        with pytest.raises(InvalidTransitionError):
            session.acknowledge_order()

    async def test_order_history_from_store(self, session):
        await ready_for_checkout(session)
        await session.place_order(DETAILS)

        history = await session.order_history()

        assert len(history) == 1
        assert history[0]["userEmail"] == "ava@example.com"
