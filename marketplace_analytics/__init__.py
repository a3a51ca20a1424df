"""
Marketplace Analytics

Admin analytics reports over the marketplace brand and product catalog.
"""

__version__ = "1.0.0"
