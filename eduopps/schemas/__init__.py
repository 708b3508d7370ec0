"""
Schemas module - Request/Response schemas for API endpoints.

All schemas live in eduopps.schemas.schemas:
- Request schemas (what API accepts)
- Response schemas (what API returns)
"""
