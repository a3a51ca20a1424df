"""
Database Models - Marketplace Catalog

Tables read by the analytics report:

- brands: brand partners on the marketplace
- products: catalog entries, each owned by one brand
- product_metrics_daily: per-product daily engagement counters
"""

from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional, List
import uuid

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all database models"""
    pass


def _new_id() -> str:
    return str(uuid.uuid4())


# =============================================================================
# ENUMERATIONS
# =============================================================================

class BrandStatus(str, Enum):
    """Brand partner status enumeration"""
    ACTIVE = "active"
    PAUSED = "paused"
    SUSPENDED = "suspended"
    PENDING = "pending"
    INACTIVE = "inactive"


class ProductStatus(str, Enum):
    """Product listing status enumeration"""
    ACTIVE = "active"
    PENDING = "pending"
    INACTIVE = "inactive"
    OUT_OF_STOCK = "out_of_stock"


# =============================================================================
# TABLES
# =============================================================================

class Brand(Base):
    """
    Brand Table

    One row per brand partner. ``created_at`` is the join date shown in
    rankings and the activity feed.
    """
    __tablename__ = "brands"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    website: Mapped[Optional[str]] = mapped_column(String(500))
    contact_email: Mapped[Optional[str]] = mapped_column(String(200))
    description: Mapped[Optional[str]] = mapped_column(Text)
    status: Mapped[BrandStatus] = mapped_column(
        SQLEnum(BrandStatus, values_callable=lambda e: [m.value for m in e]),
        default=BrandStatus.PENDING,
        nullable=False,
    )

    # Audit
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    products: Mapped[List["Product"]] = relationship(back_populates="brand")

    __table_args__ = (
        Index("ix_brands_status", "status"),
        Index("ix_brands_created_at", "created_at"),
    )


class Product(Base):
    """
    Product Table

    Catalog entries with pricing and listing status. ``current_price`` is
    the figure summed as the revenue proxy.
    """
    __tablename__ = "products"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    brand_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("brands.id", ondelete="SET NULL")
    )
    name: Mapped[str] = mapped_column(String(300), nullable=False)
    sku: Mapped[Optional[str]] = mapped_column(String(100))
    source_url: Mapped[Optional[str]] = mapped_column(String(1000))

    # Categories
    category: Mapped[Optional[str]] = mapped_column(String(100))
    sub_category: Mapped[Optional[str]] = mapped_column(String(100))

    # Pricing
    original_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2))
    current_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2))

    # Status
    status: Mapped[ProductStatus] = mapped_column(
        SQLEnum(ProductStatus, values_callable=lambda e: [m.value for m in e]),
        default=ProductStatus.PENDING,
        nullable=False,
    )
    is_featured: Mapped[bool] = mapped_column(Boolean, default=False)

    # Audit
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    brand: Mapped[Optional["Brand"]] = relationship(back_populates="products")
    metrics: Mapped[List["ProductMetricsDaily"]] = relationship(back_populates="product")

    __table_args__ = (
        Index("ix_products_brand", "brand_id"),
        Index("ix_products_category", "category"),
        Index("ix_products_status", "status"),
        Index("ix_products_created_at", "created_at"),
    )


class ProductMetricsDaily(Base):
    """
    Product Daily Metrics Table

    Engagement counters with grain at product/day level. The ranking's
    clicks figure and the overview's total views are sums over this table.
    """
    __tablename__ = "product_metrics_daily"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    product_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("products.id", ondelete="CASCADE"), nullable=False
    )
    date: Mapped[date] = mapped_column(Date, nullable=False)
    views: Mapped[int] = mapped_column(Integer, default=0)
    unique_views: Mapped[int] = mapped_column(Integer, default=0)
    clicks: Mapped[int] = mapped_column(Integer, default=0)
    conversions: Mapped[int] = mapped_column(Integer, default=0)
    saves: Mapped[int] = mapped_column(Integer, default=0)

    # Audit
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now()
    )

    # Relationships
    product: Mapped["Product"] = relationship(back_populates="metrics")

    __table_args__ = (
        UniqueConstraint("product_id", "date", name="uq_product_metrics_daily"),
        Index("ix_product_metrics_daily_date", "date"),
    )
