"""
Record Types

Immutable snapshots of store rows as the analytics engine sees them, plus
the normalisation applied at the source boundary.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Mapping, Optional, Sequence, Union

from marketplace_analytics.database.models import BrandStatus, ProductStatus


@dataclass(frozen=True)
class BrandRef:
    """Parent brand reference joined onto a product"""
    id: str
    name: str
    status: Optional[BrandStatus] = None


@dataclass(frozen=True)
class BrandRecord:
    """Brand partner snapshot"""
    id: str
    name: str
    status: BrandStatus
    created_at: datetime


@dataclass(frozen=True)
class ProductRecord:
    """Product snapshot with its parent brand reference"""
    id: str
    brand_id: Optional[str]
    name: str
    category: Optional[str]
    status: ProductStatus
    price: float
    created_at: datetime
    brand: Optional[BrandRef] = None


@dataclass(frozen=True)
class EngagementRecord:
    """Summed engagement counters for one product"""
    product_id: str
    views: int = 0
    clicks: int = 0


def to_naive_utc(value: Union[datetime, str]) -> datetime:
    """
    Normalise a timestamp to a naive UTC datetime.

    Accepts datetimes (aware or naive, naive taken as UTC) and ISO 8601
    strings, including a trailing ``Z``.
    """
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def to_price(value: Union[Decimal, float, int, None]) -> float:
    """Missing and negative prices count as zero"""
    if value is None:
        return 0.0
    return max(float(value), 0.0)


def _coerce_status(value: Any) -> Optional[BrandStatus]:
    if value is None or isinstance(value, BrandStatus):
        return value
    return BrandStatus(value)


def normalize_brand_ref(raw: Any) -> Optional[BrandRef]:
    """
    Normalise a joined brand into one optional reference.

    Joins arrive as a mapping, a one-element list of mappings, an ORM
    object with ``id``/``name``/``status`` attributes, an empty list or
    nothing at all. Extra list elements beyond the first are ignored.
    """
    if raw is None or isinstance(raw, BrandRef):
        return raw

    if isinstance(raw, Sequence) and not isinstance(raw, (str, bytes)):
        if not raw:
            return None
        raw = raw[0]

    if isinstance(raw, Mapping):
        brand_id = raw.get("id")
        name = raw.get("name")
        status = raw.get("status")
    else:
        brand_id = getattr(raw, "id", None)
        name = getattr(raw, "name", None)
        status = getattr(raw, "status", None)

    if brand_id is None:
        return None

    return BrandRef(
        id=str(brand_id),
        name=name or "",
        status=_coerce_status(status),
    )
