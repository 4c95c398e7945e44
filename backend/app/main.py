import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from backend.app.api.v1.router import router as v1_router
from backend.app.core.config import configure_logging
from backend.services.purchasing import PurchasingError

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Supply Desk", version="0.1.0")
app.include_router(v1_router, prefix="/v1")


@app.exception_handler(PurchasingError)
async def purchasing_error_handler(request: Request, exc: PurchasingError):
    logger.warning("%s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=400, content={"detail": str(exc)})
