"""
Synthetic Data Generator

Generates marketplace data for development and demos:
- Brand partners with statuses and join dates
- Products across fashion categories
- Daily engagement metrics per product
"""

import random
import uuid
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

import polars as pl
from faker import Faker

from marketplace_analytics.database.models import BrandStatus, ProductStatus
from marketplace_analytics.records.types import to_naive_utc


# =============================================================================
# CONFIGURATION
# =============================================================================

CATEGORIES = [
    ("Tops", ["Shirts", "T-Shirts", "Blouses", "Tank Tops"]),
    ("Bottoms", ["Jeans", "Trousers", "Skirts", "Shorts"]),
    ("Dresses", ["Maxi", "Midi", "Mini", "Shirt Dress"]),
    ("Outerwear", ["Jackets", "Coats", "Blazers"]),
    ("Ethnic Wear", ["Kurtas", "Sarees", "Lehengas"]),
    ("Accessories", ["Bags", "Belts", "Scarves", "Jewellery"]),
]

BRAND_STATUSES = [
    (BrandStatus.ACTIVE, 0.70),
    (BrandStatus.PENDING, 0.10),
    (BrandStatus.PAUSED, 0.10),
    (BrandStatus.SUSPENDED, 0.05),
    (BrandStatus.INACTIVE, 0.05),
]

PRODUCT_STATUSES = [
    (ProductStatus.ACTIVE, 0.75),
    (ProductStatus.PENDING, 0.10),
    (ProductStatus.INACTIVE, 0.10),
    (ProductStatus.OUT_OF_STOCK, 0.05),
]

# Share of products listed without a category
UNCATEGORIZED_RATE = 0.05


# =============================================================================
# GENERATORS
# =============================================================================

class BrandGenerator:
    """Generate brand partners"""

    def __init__(self, rng: random.Random, fake: Faker, now: datetime):
        self.rng = rng
        self.fake = fake
        self.now = now

    def generate(self, n: int = 25, history_days: int = 365) -> pl.DataFrame:
        """Generate n brands joined within the last ``history_days``"""
        brands = []

        for _ in range(n):
            status = self.rng.choices(
                [s for s, _ in BRAND_STATUSES],
                weights=[w for _, w in BRAND_STATUSES],
            )[0]
            company = self.fake.unique.company()

            brands.append({
                "id": str(uuid.UUID(int=self.rng.getrandbits(128))),
                "name": company,
                "website": f"https://{self.fake.domain_name()}",
                "contact_email": self.fake.company_email(),
                "status": status.value,
                "created_at": self.now - timedelta(
                    days=self.rng.randint(0, history_days),
                    minutes=self.rng.randint(0, 1439),
                ),
            })

        return pl.DataFrame(brands)


class ProductGenerator:
    """Generate a product catalog for existing brands"""

    def __init__(self, rng: random.Random, fake: Faker, now: datetime):
        self.rng = rng
        self.fake = fake
        self.now = now

    def generate(self, brands_df: pl.DataFrame, n: int = 300) -> pl.DataFrame:
        """Generate n products, each listed after its brand joined"""
        brand_rows = brands_df.select(["id", "created_at"]).to_dicts()
        products = []

        for _ in range(n):
            brand = self.rng.choice(brand_rows)
            category, subcategories = self.rng.choice(CATEGORIES)
            subcategory = self.rng.choice(subcategories)
            status = self.rng.choices(
                [s for s, _ in PRODUCT_STATUSES],
                weights=[w for _, w in PRODUCT_STATUSES],
            )[0]

            original_price = round(self.rng.uniform(15, 400), 2)
            discount = self.rng.choice([0, 0, 0, 10, 20, 30, 50])
            listed_for = max((self.now - brand["created_at"]).total_seconds(), 0)

            products.append({
                "id": str(uuid.UUID(int=self.rng.getrandbits(128))),
                "brand_id": brand["id"],
                "name": f"{self.fake.color_name()} {subcategory}",
                "sku": f"SKU-{self.rng.randint(10**9, 10**10 - 1)}",
                "category": None if self.rng.random() < UNCATEGORIZED_RATE else category,
                "sub_category": subcategory,
                "original_price": original_price,
                "current_price": round(original_price * (100 - discount) / 100, 2),
                "status": status.value,
                "is_featured": self.rng.random() < 0.1,
                "created_at": brand["created_at"] + timedelta(
                    seconds=self.rng.uniform(0, listed_for),
                ),
            })

        return pl.DataFrame(products)


class MetricsGenerator:
    """Generate daily engagement counters per product"""

    def __init__(self, rng: random.Random, now: datetime):
        self.rng = rng
        self.now = now

    def generate(self, products_df: pl.DataFrame, days: int = 14) -> pl.DataFrame:
        """Counters for the last ``days`` days of every product"""
        metrics = []
        today = self.now.date()

        for product in products_df.select(["id", "created_at"]).to_dicts():
            popularity = self.rng.uniform(0.2, 3.0)
            first_day = max(product["created_at"].date(), today - timedelta(days=days - 1))
            day = first_day

            while day <= today:
                views = int(self.rng.expovariate(1 / (40 * popularity)))
                clicks = int(views * self.rng.uniform(0.05, 0.3))
                metrics.append({
                    "id": str(uuid.UUID(int=self.rng.getrandbits(128))),
                    "product_id": product["id"],
                    "date": day,
                    "views": views,
                    "unique_views": int(views * self.rng.uniform(0.6, 0.95)),
                    "clicks": clicks,
                    "conversions": int(clicks * self.rng.uniform(0.0, 0.2)),
                    "saves": int(views * self.rng.uniform(0.0, 0.05)),
                })
                day += timedelta(days=1)

        return pl.DataFrame(metrics)


class MarketplaceDataGenerator:
    """
    Orchestrates all generators.

    Output is reproducible for a given ``seed`` and ``now``.

    Example:
        data = MarketplaceDataGenerator(seed=42).generate_all()
        data["brands"].head()
    """

    def __init__(self, seed: int = 42, now: Optional[datetime] = None):
        self.now = to_naive_utc(now or datetime.now(timezone.utc))
        self.rng = random.Random(seed)
        self.fake = Faker()
        self.fake.seed_instance(seed)

    def generate_all(
        self,
        n_brands: int = 25,
        n_products: int = 300,
        metric_days: int = 14,
    ) -> Dict[str, pl.DataFrame]:
        """Generate brands, products and daily metrics."""
        brands = BrandGenerator(self.rng, self.fake, self.now).generate(n_brands)
        products = (
            ProductGenerator(self.rng, self.fake, self.now).generate(brands, n_products)
            if n_brands > 0 else pl.DataFrame()
        )
        metrics = (
            MetricsGenerator(self.rng, self.now).generate(products, metric_days)
            if len(products) > 0 else pl.DataFrame()
        )

        return {
            "brands": brands,
            "products": products,
            "product_metrics_daily": metrics,
        }
