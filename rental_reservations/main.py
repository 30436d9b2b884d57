# rental_reservations/main.py

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from rental_reservations.config import ALLOWED_ORIGINS
from rental_reservations.logging_config import setup_logging
from rental_reservations.middleware import RequestIDMiddleware
from rental_reservations.routes.health import router as health_router
from rental_reservations.routes.metrics import router as metrics_router
from rental_reservations.routes.properties import router as properties_router
from rental_reservations.routes.reservations import router as reservations_router

# Initialize structured logging
setup_logging()
logger = structlog.get_logger(__name__)

app = FastAPI(
    title="Rental Reservations API",
    description="Reservation lifecycle and availability calendar for short-term rentals",
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
app.include_router(reservations_router, prefix="/reservations", tags=["Reservations"])
app.include_router(properties_router, prefix="/properties", tags=["Properties"])
