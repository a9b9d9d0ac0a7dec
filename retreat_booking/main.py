# retreat_booking/main.py

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from retreat_booking.config import ALLOWED_ORIGINS
from retreat_booking.logging_config import setup_logging
from retreat_booking.middleware import RequestIDMiddleware
from retreat_booking.routes.calendar import router as calendar_router
from retreat_booking.routes.health import router as health_router
from retreat_booking.routes.metrics import router as metrics_router
from retreat_booking.routes.reservations import router as reservations_router
from retreat_booking.routes.waitlist import router as waitlist_router

# Initialize structured logging
setup_logging()
logger = structlog.get_logger(__name__)

app = FastAPI(
    title="Retreat Booking API",
    description="Capacity-safe retreat reservations, payments, check-in/out and scheduling",
    version="1.0.0",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS if "*" not in ALLOWED_ORIGINS else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestIDMiddleware)

# Register routers
app.include_router(health_router, tags=["Health"])
app.include_router(metrics_router, tags=["Metrics"])
app.include_router(reservations_router, tags=["Reservations"])
app.include_router(calendar_router, tags=["Calendar"])
app.include_router(waitlist_router, tags=["Waitlist"])
