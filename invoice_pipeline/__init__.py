"""
Invoice and supplier CSV ingestion with dashboard analytics.
"""

__version__ = "0.1.0"
