"""
Frontdesk application entry point
Hotel booking lifecycle: availability, pricing, cancellation and audit
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from booking_core.errors import PreconditionViolation
from frontdesk.config import settings
from frontdesk.database import init_db
from frontdesk.routers import auth, rooms, extras, bookings, users

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan"""
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    init_db()
    logger.info(f"{settings.APP_NAME} started")

    yield


app = FastAPI(
    title=settings.APP_NAME,
    description="Hotel booking lifecycle engine",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PreconditionViolation)
async def precondition_violation_handler(request: Request, exc: PreconditionViolation):
    """Data the engine relies on was missing: a defect, not a client error"""
    logger.exception(f"Precondition violated on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": str(exc), "field": exc.field})


app.include_router(auth.router)
app.include_router(rooms.category_router)
app.include_router(rooms.room_router)
app.include_router(extras.router)
app.include_router(bookings.router)
app.include_router(users.router)


@app.get("/")
def root():
    return {
        "name": settings.APP_NAME,
        "version": "1.0.0",
    }


@app.get("/health")
def health_check():
    """Health check"""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
