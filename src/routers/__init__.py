"""
Routers de la API
"""
from .assignments import router as assignments_router
from .weekly_assignments import router as weekly_assignments_router
from .meetings import router as meetings_router
from .discussed_products import router as discussed_products_router

__all__ = [
    "assignments_router",
    "weekly_assignments_router",
    "meetings_router",
    "discussed_products_router"
]
