from fastapi import APIRouter

from backend.app.api.v1.endpoints.health import router as health_router
from backend.app.api.v1.endpoints.categories import router as categories_router
from backend.app.api.v1.endpoints.products import router as products_router
from backend.app.api.v1.endpoints.suppliers import router as suppliers_router
from backend.app.api.v1.endpoints.purchase_orders import router as purchase_orders_router
from backend.app.api.v1.endpoints.receipts import router as receipts_router
from backend.app.api.v1.endpoints.tracking_numbers import router as tracking_numbers_router

router = APIRouter()
router.include_router(health_router, tags=["health"])
router.include_router(categories_router, tags=["categories"])
router.include_router(products_router, tags=["products"])
router.include_router(suppliers_router, tags=["suppliers"])
router.include_router(purchase_orders_router, tags=["purchase_orders"])
router.include_router(receipts_router, tags=["receipts"])
router.include_router(tracking_numbers_router, tags=["tracking_numbers"])
