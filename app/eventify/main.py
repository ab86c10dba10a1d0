import logging
import os
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from eventify.constant_file import LOG_LEVEL, CORS_ORIGINS, REMINDER_SCHEDULER_ENABLED

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

from eventify.routes.user_route import router as UserRouter
from eventify.routes.event_route import router as EventRouter
from eventify.routes.room_route import router as RoomRouter
from eventify.routes.qr_code_route import router as QRcodeRouter
from eventify.scheduler import init_scheduler, shutdown_scheduler
from eventify.controller.upload_handler import UPLOAD_ROOT

from eventify.database import Base, engine
from eventify.models.user_model import User
from eventify.models.room_model import Room
from eventify.models.event_model import Event
from eventify.models.registration_model import Registration
from eventify.models.attendee_model import Attendee
from eventify.models.otp_records_model import OTPRecord


@asynccontextmanager
async def lifespan(app: FastAPI):
    if REMINDER_SCHEDULER_ENABLED:
        init_scheduler()
    yield
    shutdown_scheduler()


app = FastAPI(title="Eventify", lifespan=lifespan)

# Serve uploaded avatars and event banners
os.makedirs(UPLOAD_ROOT, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=UPLOAD_ROOT), name="uploads")

app.include_router(UserRouter, tags=["User"], prefix="/user")
app.include_router(EventRouter, tags=["Event"], prefix="/event")
app.include_router(RoomRouter, tags=["Room"], prefix="/room")
app.include_router(QRcodeRouter, tags=["QRcode"], prefix="/scan_qr")

# Create all tables (must be after importing all models)
# The server still starts when the database is unreachable
try:
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created successfully")
except Exception as e:
    logger.warning("Could not create database tables: %s", e)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["POST", "GET", "OPTIONS", "DELETE", "PUT"],
    allow_headers=["*"],
)
