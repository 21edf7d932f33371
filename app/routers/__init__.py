# app/routers/__init__.py

from .operations.production_router import router as production_router
from .operations.barging_router import router as barging_router

from .stock.stock_router import router as stock_router


__all__ = [
"production_router",
"barging_router",

"stock_router",
]
