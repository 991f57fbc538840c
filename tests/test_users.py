"""Tests for the account client (address book, password, stats)"""
from decimal import Decimal

import pytest

from storefront.auth import SessionStatus
from storefront.errors import (
    ERROR_ADDRESS_INCOMPLETE,
    ERROR_CURRENT_PASSWORD_REQUIRED,
    ERROR_INVALID_ADDRESS_TYPE,
    ERROR_PASSWORD_MISMATCH,
    ApiError,
    AuthenticationError,
    ValidationError,
)
from storefront.models import Address
from storefront.ui import NoticeLevel
from storefront.users import UserService, build_address_payload


@pytest.fixture
def users(client) -> UserService:
    return UserService(client)


@pytest.fixture
def home() -> Address:
    return Address(street="12 MG Road", city="Pune", state="MH", zip_code="411001")


class TestBuildAddressPayload:
    def test_wire_names(self, home):
        assert build_address_payload(home) == {
            "type": "home",
            "street": "12 MG Road",
            "city": "Pune",
            "state": "MH",
            "zipCode": "411001",
            "country": "India",
        }

    def test_fields_are_trimmed(self):
        address = Address(street=" 1 Main St ", city="Pune ", state="MH", zip_code=" 411001", country="India")
        payload = build_address_payload(address)
        assert payload["street"] == "1 Main St"
        assert payload["zipCode"] == "411001"

    def test_blank_field_rejected(self, home):
        with pytest.raises(ValidationError) as exc_info:
            build_address_payload(home.model_copy(update={"city": "   "}))
        assert exc_info.value.message == ERROR_ADDRESS_INCOMPLETE

    def test_unknown_type_rejected(self, home):
        with pytest.raises(ValidationError) as exc_info:
            build_address_payload(home.model_copy(update={"type": "cabin"}))
        assert exc_info.value.message == ERROR_INVALID_ADDRESS_TYPE


class TestAddress:
    @pytest.mark.asyncio
    async def test_empty_address_book(self, signed_in, users):
        assert await users.get_address() is None

    @pytest.mark.asyncio
    async def test_update_then_get(self, signed_in, users, backend, notifier, home):
        saved = await users.update_address(home)

        assert saved.id == "a1"
        assert saved.is_default
        assert notifier.last.level == NoticeLevel.SUCCESS
        assert notifier.last.message == "Address updated successfully"

        fetched = await users.get_address()
        assert fetched.street == "12 MG Road"
        assert fetched.zip_code == "411001"

    @pytest.mark.asyncio
    async def test_new_address_becomes_default(self, signed_in, users, backend, home):
        await users.update_address(home)
        await users.update_address(home.model_copy(update={"type": "work", "street": "5 Tech Park"}))

        fetched = await users.get_address()
        assert fetched.street == "5 Tech Park"
        assert [a["isDefault"] for a in backend.addresses] == [False, True]

    @pytest.mark.asyncio
    async def test_invalid_address_makes_no_request(self, signed_in, users, backend, home):
        with pytest.raises(ValidationError):
            await users.update_address(home.model_copy(update={"street": ""}))
        assert backend.requests == []

    @pytest.mark.asyncio
    async def test_signed_out_request_drops_to_login(self, session, users, navigator):
        with pytest.raises(AuthenticationError):
            await users.get_address()

        assert session.status == SessionStatus.ANONYMOUS
        assert navigator.current_path == "/login"


class TestChangePassword:
    @pytest.mark.asyncio
    async def test_change_password(self, signed_in, users, backend, notifier):
        old = backend.password

        await users.change_password(old, "brand-new", "brand-new")

        assert backend.last_json("PUT", "/user/password") == {
            "currentPassword": old,
            "newPassword": "brand-new",
        }
        assert backend.password == "brand-new"
        assert notifier.last.message == "Password updated successfully"

    @pytest.mark.asyncio
    async def test_wrong_current_password(self, signed_in, users, backend, notifier):
        with pytest.raises(ApiError) as exc_info:
            await users.change_password("nope", "brand-new")

        assert exc_info.value.status_code == 400
        assert notifier.last.message == "Current password is incorrect"
        assert signed_in.is_authenticated

    @pytest.mark.asyncio
    @pytest.mark.parametrize("current, new, confirm, message", [
        ("", "brand-new", None, ERROR_CURRENT_PASSWORD_REQUIRED),
        ("secret", "brand-new", "brand-old", ERROR_PASSWORD_MISMATCH),
    ])
    async def test_validated_locally(self, signed_in, users, backend, current, new, confirm, message):
        with pytest.raises(ValidationError) as exc_info:
            await users.change_password(current, new, confirm)

        assert exc_info.value.message == message
        assert backend.requests == []


class TestStats:
    @pytest.mark.asyncio
    async def test_get_stats(self, signed_in, users):
        stats = await users.get_stats()

        assert stats.total_orders == 3
        assert stats.total_spent == Decimal("245.50")
        assert stats.favorite_category == "dairy"
        assert stats.member_since == "Jan 2024"
