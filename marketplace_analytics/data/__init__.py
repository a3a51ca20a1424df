"""
Synthetic Data Module
"""
from .generators import MarketplaceDataGenerator

__all__ = ["MarketplaceDataGenerator"]
