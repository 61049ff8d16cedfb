"""
Wedding Planner - FastAPI Backend

Serves the couple's admin API, the guest-facing RSVP and memory wall API,
the public wedding website and the live update websocket.
"""

import os
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
import uvicorn

from app.core.config import settings
from app.core.db import engine, Base
from app.api import routes_admin, routes_guestlist, routes_guest, routes_public, routes_email, ws
from app.services.firebase_client import init_firebase_app

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

# (router, prefix, tag)
ROUTERS = [
    (routes_public.router, "", "public"),
    (routes_guest.router, "/guest", "guest"),
    (routes_admin.router, "/admin", "admin"),
    (routes_guestlist.router, "/admin", "guest list"),
    (routes_email.router, "/api", "email"),
    (ws.router, "/ws", "websocket"),
]

@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.USE_FIREBASE:
        # Fail at startup rather than on the first request
        init_firebase_app()
        logger.info("Firestore, Firebase Storage and Firebase Auth enabled")
    else:
        Base.metadata.create_all(bind=engine)
        logger.info(f"Local document store ready at {settings.DATABASE_URL}")
    yield
    logger.info("Wedding Planner shutting down")

app = FastAPI(
    title="Wedding Planner",
    description="Backend for wedding websites, guest lists, RSVPs and live updates",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Locally stored cover images and gallery media
os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")

for router, prefix, tag in ROUTERS:
    app.include_router(router, prefix=prefix, tags=[tag])

if __name__ == "__main__":
    uvicorn.run("main:app", host="127.0.0.1", port=8000, reload=True)
