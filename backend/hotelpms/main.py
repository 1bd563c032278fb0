"""
HotelPMS application entry point
Booking - Room - Invoice settlement engine behind a REST API
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hotelpms import __version__
from hotelpms.config import settings
from hotelpms.database import init_db
from hotelpms.routers import auth, rooms, guests, bookings, invoices, employees, pos

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle"""
    init_db()

    from hotelpms.services.event_handlers import register_event_handlers
    register_event_handlers()

    logger.info(f"{settings.APP_NAME} {__version__} started")
    yield


app = FastAPI(
    title="HotelPMS - Booking, Room and Invoice Settlement",
    description="Room status, booking lifecycle, invoice settlement and guest loyalty",
    version=__version__,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(rooms.router)
app.include_router(guests.router)
app.include_router(bookings.router)
app.include_router(invoices.router)
app.include_router(employees.router)
app.include_router(pos.router)


@app.get("/")
def root():
    return {"name": settings.APP_NAME, "version": __version__}


@app.get("/health")
def health_check():
    return {"status": "healthy"}
