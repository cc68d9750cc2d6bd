import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from jarimae.config import get_settings
from jarimae.api.routes import auth, users, stores, reservations, notifications

settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title=settings.app_name,
    description="API for Jarimae restaurant discovery and reservations",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
app.include_router(users.router, prefix="/api/users", tags=["Users"])
app.include_router(stores.router, prefix="/api/stores", tags=["Stores"])
app.include_router(reservations.router, prefix="/api/reservations", tags=["Reservations"])
app.include_router(notifications.router, prefix="/api/notifications", tags=["Notifications"])


@app.get("/")
async def root():
    return {"message": "Jarimae Reservations API", "version": "1.0.0"}


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
