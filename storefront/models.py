"""
Pydantic Models - Backend payload schemas

The backend speaks camelCase JSON with Mongo-style ``_id`` keys. Every model
accepts those names through aliases and exposes snake_case attributes;
unknown keys are ignored so new backend fields never break parsing.
"""
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, List, Dict

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from storefront.services.money import to_decimal as _to_decimal


class ApiModel(BaseModel):
    """Base for all backend payloads."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# ============================================================
# Enums
# ============================================================

class UserRole(str, Enum):
    CUSTOMER = "customer"
    ADMIN = "admin"


class ProductUnit(str, Enum):
    KG = "kg"
    G = "g"
    L = "l"
    ML = "ml"
    PIECE = "piece"
    PACK = "pack"


class OrderStatus(str, Enum):
    """Order status lifecycle."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    PACKED = "packed"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(str, Enum):
    COD = "cod"
    CARD = "card"
    UPI = "upi"
    WALLET = "wallet"


class AddressType(str, Enum):
    HOME = "home"
    WORK = "work"
    OTHER = "other"


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


# ============================================================
# Users
# ============================================================

class Address(ApiModel):
    id: Optional[str] = Field(default=None, alias="_id")
    type: str = AddressType.HOME.value
    street: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = Field(default="", alias="zipCode")
    country: str = "India"
    is_default: bool = Field(default=False, alias="isDefault")


class User(ApiModel):
    """Authenticated identity as returned by /auth endpoints."""
    id: str = Field(alias="_id")
    name: str = ""
    email: str = ""
    phone: str = ""
    role: UserRole = UserRole.CUSTOMER
    addresses: List[Address] = []
    is_active: bool = Field(default=True, alias="isActive")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


class AuthResponse(ApiModel):
    user: User
    token: str


class UserStats(ApiModel):
    """Order statistics for the signed-in customer."""
    total_orders: int = Field(default=0, alias="totalOrders")
    total_spent: Decimal = Field(default=Decimal("0"), alias="totalSpent")
    favorite_category: str = Field(default="", alias="favoriteCategory")
    member_since: str = Field(default="", alias="memberSince")

    @field_validator("total_spent", mode="before")
    @classmethod
    def convert_total_spent(cls, v):
        return _to_decimal(v)


# ============================================================
# Catalog
# ============================================================

class ProductImage(ApiModel):
    url: str
    alt: str = ""


class Product(ApiModel):
    """Catalog product. ``discounted_price`` is set by the backend when an offer applies."""
    id: str = Field(alias="_id")
    name: str
    description: str = ""
    category: str = ""
    price: Decimal
    original_price: Optional[Decimal] = Field(default=None, alias="originalPrice")
    discounted_price: Optional[Decimal] = Field(default=None, alias="discountedPrice")
    discount_percentage: Optional[float] = Field(default=None, alias="discountPercentage")
    stock: int = 0
    unit: str = ProductUnit.PIECE.value
    images: List[ProductImage] = []
    is_active: bool = Field(default=True, alias="isActive")
    is_featured: bool = Field(default=False, alias="isFeatured")
    tags: List[str] = []
    brand: Optional[str] = None
    expiry_days: Optional[int] = Field(default=None, alias="expiryDays")
    average_rating: Optional[float] = Field(default=None, alias="averageRating")
    total_reviews: Optional[int] = Field(default=None, alias="totalReviews")

    @field_validator("price", mode="before")
    @classmethod
    def convert_price_to_decimal(cls, v):
        return _to_decimal(v)

    @field_validator("original_price", "discounted_price", mode="before")
    @classmethod
    def convert_optional_price(cls, v):
        return _to_decimal(v) if v is not None else None


class Pagination(ApiModel):
    current_page: int = Field(default=1, alias="currentPage")
    total_pages: int = Field(default=1, alias="totalPages")
    total: int = Field(
        default=0,
        validation_alias=AliasChoices("totalProducts", "totalOrders", "totalReviews", "total"),
    )
    has_next: bool = Field(default=False, alias="hasNext")
    has_prev: bool = Field(default=False, alias="hasPrev")


class ProductPage(ApiModel):
    products: List[Product] = []
    pagination: Pagination = Field(default_factory=Pagination)


class Category(ApiModel):
    id: str = Field(alias="_id")
    name: str
    slug: str
    description: Optional[str] = None
    image: Optional[ProductImage] = None
    is_active: bool = Field(default=True, alias="isActive")
    display_order: int = Field(default=0, alias="displayOrder")


# ============================================================
# Reviews
# ============================================================

class ReviewAuthor(ApiModel):
    id: str = Field(alias="_id")
    name: str = ""


class Review(ApiModel):
    id: str = Field(alias="_id")
    user: Optional[ReviewAuthor] = None
    product: Optional[str] = None
    order: Optional[str] = None
    rating: int
    title: str = ""
    comment: str = ""
    is_verified_purchase: bool = Field(default=False, alias="isVerifiedPurchase")
    helpful_count: int = Field(default=0, alias="helpfulCount")
    moderation_status: str = Field(default="pending", alias="moderationStatus")
    images: List[ProductImage] = []
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")

    @field_validator("product", mode="before")
    @classmethod
    def product_id_only(cls, v):
        # Populated reviews embed the whole product document
        if isinstance(v, dict):
            return v.get("_id")
        return v


class RatingStats(ApiModel):
    average_rating: float = Field(default=0.0, alias="averageRating")
    total_reviews: int = Field(default=0, alias="totalReviews")
    rating_breakdown: Dict[str, int] = Field(default_factory=dict, alias="ratingBreakdown")


class ReviewPage(ApiModel):
    reviews: List[Review] = []
    pagination: Pagination = Field(default_factory=Pagination)
    rating_stats: RatingStats = Field(default_factory=RatingStats, alias="ratingStats")


# ============================================================
# Offers
# ============================================================

class Offer(ApiModel):
    id: Optional[str] = Field(default=None, alias="_id")
    code: str
    title: str = ""
    description: str = ""
    discount_type: DiscountType = Field(alias="discountType")
    value: Decimal
    minimum_order: Decimal = Field(default=Decimal("0"), alias="minimumOrder")
    maximum_discount: Optional[Decimal] = Field(default=None, alias="maximumDiscount")
    usage_limit: Optional[int] = Field(default=None, alias="usageLimit")
    used_count: int = Field(default=0, alias="usedCount")
    is_active: bool = Field(default=True, alias="isActive")
    valid_from: Optional[datetime] = Field(default=None, alias="validFrom")
    valid_until: Optional[datetime] = Field(default=None, alias="validUntil")

    @field_validator("value", "minimum_order", mode="before")
    @classmethod
    def convert_to_decimal(cls, v):
        return _to_decimal(v)

    @field_validator("maximum_discount", mode="before")
    @classmethod
    def convert_optional_to_decimal(cls, v):
        return _to_decimal(v) if v is not None else None


# ============================================================
# Orders
# ============================================================

class DeliverySlot(ApiModel):
    date: str
    time_slot: str = Field(alias="timeSlot")


class OrderItem(ApiModel):
    product_id: str = Field(alias="productId")
    name: str = ""
    price: Decimal
    quantity: int
    unit: str = ""

    @field_validator("price", mode="before")
    @classmethod
    def convert_price_to_decimal(cls, v):
        return _to_decimal(v)


class TrackingUpdate(ApiModel):
    status: str
    message: str = ""
    timestamp: Optional[datetime] = None
    location: Optional[str] = None


class Order(ApiModel):
    id: str = Field(alias="_id")
    order_number: str = Field(default="", alias="orderNumber")
    items: List[OrderItem] = []
    subtotal: Decimal = Decimal("0")
    tax: Decimal = Decimal("0")
    delivery_fee: Decimal = Field(default=Decimal("0"), alias="deliveryFee")
    discount: Decimal = Decimal("0")
    total: Decimal = Decimal("0")
    status: OrderStatus = OrderStatus.PENDING
    payment_status: PaymentStatus = Field(default=PaymentStatus.PENDING, alias="paymentStatus")
    payment_method: Optional[PaymentMethod] = Field(default=None, alias="paymentMethod")
    delivery_address: Optional[Address] = Field(default=None, alias="deliveryAddress")
    delivery_slot: Optional[DeliverySlot] = Field(default=None, alias="deliverySlot")
    notes: Optional[str] = None
    tracking_updates: List[TrackingUpdate] = Field(default_factory=list, alias="trackingUpdates")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")

    @field_validator("subtotal", "tax", "delivery_fee", "discount", "total", mode="before")
    @classmethod
    def convert_amount_to_decimal(cls, v):
        return _to_decimal(v)
