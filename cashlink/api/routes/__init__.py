# cashlink/api/routes/__init__.py
from cashlink.api.routes.nearby import router as nearby_router
from cashlink.api.routes.rides import router as rides_router
from cashlink.api.routes.stats import router as stats_router
from cashlink.api.routes.transactions import router as transactions_router

__all__ = ["nearby_router", "rides_router", "stats_router", "transactions_router"]
