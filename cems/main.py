import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from cems.api.v1.api import api_router
from cems.core.config import settings
from cems.core.error_handlers import register_exception_handlers
from cems.core.limiter import limiter
from cems.db.base_class import Base
from cems.db.session import SessionLocal, engine
from cems.services.settings_provider import seed_default_settings
import cems.models  # noqa: F401  registers every table on Base.metadata

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seed_default_settings(db)
    finally:
        db.close()
    logger.info("Database tables checked and default settings seeded.")
    yield
    logger.info("Application shutting down...")


app = FastAPI(
    title="CEMS Event Service",
    version="1.0.0",
    description="""
        **Campus Event Management Service**

        * **Events**: Organizers propose events, admins approve, reject, cancel or complete them
        * **Registrations**: Students register, receive a QR pass and give feedback after attending
        * **Attendance**: Organizers mark attendance manually or by scanning passes
        * **Venues**: Admin-managed venues with booking conflict checks
        * **Notifications**: In-app notifications and admin announcements

        Most endpoints require JWT authentication via the `Authorization: Bearer <token>` header.
        """,
    lifespan=lifespan,
)

app.state.limiter = limiter
register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,  # Allow cookies and authorization headers
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api/v1")

# Generated QR images and PDF passes
os.makedirs(settings.UPLOADS_DIR, exist_ok=True)
app.mount(
    settings.UPLOADS_URL_PREFIX,
    StaticFiles(directory=settings.UPLOADS_DIR),
    name="uploads",
)


@app.get("/")
def read_root():
    return {"status": "CEMS Event Service is running"}
