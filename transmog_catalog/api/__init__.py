"""Transmog catalog API layer: routes, schemas and middleware."""

from transmog_catalog.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from transmog_catalog.api.routes import router
from transmog_catalog.api.schemas import (
    CacheClearResponse,
    ErrorResponse,
    FiltersResponse,
    HealthResponse,
    HydrationStatusResponse,
    TransmogDetailResponse,
    TransmogListResponse,
    TransmogResponse,
)

__all__ = [
    "ErrorHandlingMiddleware",
    "RequestLoggingMiddleware",
    "configure_cors",
    "router",
    "CacheClearResponse",
    "ErrorResponse",
    "FiltersResponse",
    "HealthResponse",
    "HydrationStatusResponse",
    "TransmogDetailResponse",
    "TransmogListResponse",
    "TransmogResponse",
]
