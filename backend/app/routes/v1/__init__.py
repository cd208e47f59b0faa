"""
API v1 Routes

Versioned API endpoints under /api/v1.
"""

from . import bookings, catalog, customers, health, prometheus

__all__ = ["bookings", "catalog", "customers", "health", "prometheus"]
