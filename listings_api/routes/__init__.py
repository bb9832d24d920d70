"""
HTTP routers for the listings API.
"""

from listings_api.routes.health import router as health_router
from listings_api.routes.properties import router as properties_router
from listings_api.routes.users import router as users_router

__all__ = ["health_router", "properties_router", "users_router"]
