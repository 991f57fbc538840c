"""
Application composition root.

Builds every collaborator once and wires them explicitly:
settings -> token store -> notifier/navigator -> API client -> session -> cart
plus the catalog, offer, order, account and media clients.
"""
from typing import Optional

import httpx

from storefront.auth.session import SessionState, SessionStatus
from storefront.cart.service import CartManager
from storefront.catalog import CategoryService, ProductService, ReviewService
from storefront.config import Settings, get_settings
from storefront.http.client import ApiClient
from storefront.http.tokens import FileTokenStore, TokenStore
from storefront.logging import get_logger
from storefront.media import MediaService
from storefront.offers import OfferService
from storefront.orders import OrderService
from storefront.ui import Navigator, Notifier
from storefront.users import UserService

logger = get_logger(__name__)


class StorefrontApp:
    """Owns the session, the cart and the service clients for one user."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        token_store: Optional[TokenStore] = None,
        notifier: Optional[Notifier] = None,
        navigator: Optional[Navigator] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_settings()
        self.token_store = token_store or FileTokenStore(
            self.settings.token_path, ttl_days=self.settings.token_ttl_days
        )
        self.notifier = notifier or Notifier()
        self.navigator = navigator or Navigator()

        self.client = ApiClient(
            token_store=self.token_store,
            notifier=self.notifier,
            navigator=self.navigator,
            base_url=self.settings.api_url,
            timeout=self.settings.timeout,
            transport=transport,
        )
        self.session = SessionState(self.client)
        self.cart = CartManager(self.client, self.session, self.notifier)
        self.session.subscribe(self.cart.on_session_change)

        self.products = ProductService(self.client)
        self.categories = CategoryService(self.client)
        self.reviews = ReviewService(self.client)
        self.offers = OfferService(self.client)
        self.orders = OrderService(self.client, cart_manager=self.cart)
        self.users = UserService(self.client)
        self.media = MediaService(
            self.client,
            upload_url=self.settings.media_upload_url,
            default_folder=self.settings.media_folder,
        )

    async def start(self) -> SessionStatus:
        """Resolve the stored session; the cart loads through the session listener."""
        status = await self.session.start()
        logger.info(f"Storefront started against {self.settings.api_url} ({status.value})")
        return status

    async def aclose(self) -> None:
        await self.client.aclose()

    async def __aenter__(self) -> "StorefrontApp":
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
