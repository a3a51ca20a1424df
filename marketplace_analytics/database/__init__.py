"""
Database Module
"""
from .connection import (
    build_engine,
    build_session_factory,
    check_database_health,
    close_database,
    create_schema,
    get_db,
    get_session_factory,
    init_database,
)
from .models import Base, Brand, BrandStatus, Product, ProductMetricsDaily, ProductStatus

__all__ = [
    "build_engine",
    "build_session_factory",
    "check_database_health",
    "close_database",
    "create_schema",
    "get_db",
    "get_session_factory",
    "init_database",
    "Base",
    "Brand",
    "BrandStatus",
    "Product",
    "ProductMetricsDaily",
    "ProductStatus",
]
