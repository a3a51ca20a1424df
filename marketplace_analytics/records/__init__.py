"""
Record Source Module
"""
from .source import RecordSource, SQLRecordSource
from .types import BrandRecord, BrandRef, EngagementRecord, ProductRecord, normalize_brand_ref

__all__ = [
    "RecordSource",
    "SQLRecordSource",
    "BrandRecord",
    "BrandRef",
    "EngagementRecord",
    "ProductRecord",
    "normalize_brand_ref",
]
