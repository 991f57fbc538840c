"""
Account - delivery address book, password change and order statistics.

All calls need a signed-in session; a 401 drops the session through the
HTTP facade like any other request.
"""
from typing import Any, Dict, Optional

from storefront.auth.session import validate_new_password
from storefront.errors import (
    ERROR_ADDRESS_INCOMPLETE,
    ERROR_CURRENT_PASSWORD_REQUIRED,
    ERROR_INVALID_ADDRESS_TYPE,
    NOTICE_ADDRESS_UPDATED,
    NOTICE_PASSWORD_UPDATED,
    ValidationError,
)
from storefront.http.client import ApiClient
from storefront.logging import get_logger, sanitize_id_for_logging
from storefront.models import Address, AddressType, UserStats

logger = get_logger(__name__)

_REQUIRED_ADDRESS_FIELDS = ("street", "city", "state", "zip_code", "country")


def build_address_payload(address: Address) -> Dict[str, Any]:
    """Validate ``address`` and return the body for ``PUT /user/address``."""
    if address.type not in {t.value for t in AddressType}:
        raise ValidationError(ERROR_INVALID_ADDRESS_TYPE)
    if any(not getattr(address, name).strip() for name in _REQUIRED_ADDRESS_FIELDS):
        raise ValidationError(ERROR_ADDRESS_INCOMPLETE)

    payload = address.model_dump(by_alias=True, exclude={"id", "is_default"})
    return {key: value.strip() if isinstance(value, str) else value for key, value in payload.items()}


class UserService:
    """Client for the signed-in customer's ``/user`` endpoints."""

    def __init__(self, client: ApiClient):
        self.client = client

    # ==================== ADDRESS ====================

    async def get_address(self) -> Optional[Address]:
        """Default delivery address (or the first one); None when the book is empty."""
        response = await self.client.get("/user/address")
        data = (response or {}).get("data")
        return Address.model_validate(data) if data else None

    async def update_address(self, address: Address) -> Address:
        """
        Save ``address`` as the new default delivery address.

        The backend appends it to the address book and clears the default
        flag on every older entry.
        """
        payload = build_address_payload(address)
        response = await self.client.put("/user/address", json=payload)
        saved = Address.model_validate(response["data"])
        logger.info(f"Default address saved ({sanitize_id_for_logging(saved.id)})")
        self.client.notifier.success(NOTICE_ADDRESS_UPDATED)
        return saved

    # ==================== PASSWORD ====================

    async def change_password(
        self,
        current_password: str,
        new_password: str,
        confirm_password: Optional[str] = None,
    ) -> None:
        """
        Change the password of the signed-in user.

        Raises:
            ValidationError: missing current password, short or mismatched new one
            ApiError: current password rejected by the backend
        """
        if not current_password:
            raise ValidationError(ERROR_CURRENT_PASSWORD_REQUIRED)
        validate_new_password(new_password, confirm_password)

        await self.client.put(
            "/user/password",
            json={"currentPassword": current_password, "newPassword": new_password},
        )
        self.client.notifier.success(NOTICE_PASSWORD_UPDATED)

    # ==================== STATS ====================

    async def get_stats(self) -> UserStats:
        response = await self.client.get("/user/stats")
        return UserStats.model_validate(response.get("data") or {})
