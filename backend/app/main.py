# app/main.py
import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.core.db import db_health, init_db, close_db
from app.core.errors import (
    ServiceError,
    service_error_handler,
    unhandled_error_handler,
    validation_error_handler,
)

from app.api.v1.routers import auth, messages, suggestions

logger = logging.getLogger("uvicorn.error")
logger.setLevel(settings.log_level.upper())

app = FastAPI(title=settings.APP_NAME)

# CORS (with Cookie)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Every failure leaves as {"success": false, "message": ...}
app.add_exception_handler(ServiceError, service_error_handler)
app.add_exception_handler(RequestValidationError, validation_error_handler)
app.add_exception_handler(Exception, unhandled_error_handler)

@app.on_event("startup")
async def on_startup():
    # Exits the process if the store is not configured or unreachable
    await init_db()

@app.on_event("shutdown")
async def on_shutdown():
    await close_db()

# REST
app.include_router(auth.router, prefix="/api")
app.include_router(messages.router, prefix="/api")
app.include_router(suggestions.router, prefix="/api")

@app.get("/healthz")
async def healthz():
    return {"ok": True, "db": await db_health()}


def run():
    import uvicorn
    uvicorn.run("app.main:app", host=settings.host, port=settings.port, reload=settings.env == "dev")


if __name__ == "__main__":
    run()
