from datetime import datetime, timezone
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.staticfiles import StaticFiles
from app.api.endpoints import auth, projects, experiences, skills, about, contacts, newsletter
from app.core.config import settings
from app.core.errors import register_exception_handlers
from app.core.middleware import RateLimitMiddleware, RequestLoggingMiddleware, SecurityHeadersMiddleware
from app.db.database import connect_to_mongo, close_mongo_connection
from app.tools.file_uploader import LocalStorage, build_storage
from contextlib import asynccontextmanager
from pathlib import Path
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    await connect_to_mongo()
    yield
    await close_mongo_connection()

app = FastAPI(title="Portfolio API", version="1.0.0", lifespan=lifespan)

# Storage backend is chosen once here; handlers get it from app.state
app.state.storage = build_storage(settings)
if isinstance(app.state.storage, LocalStorage):
    Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")

app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(
    RateLimitMiddleware,
    max_requests=settings.RATE_LIMIT_MAX,
    window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
)
if settings.is_development:
    app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

register_exception_handlers(app)

app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(projects.router, prefix="/api/projects", tags=["projects"])
app.include_router(experiences.router, prefix="/api/experiences", tags=["experiences"])
app.include_router(skills.router, prefix="/api/skills", tags=["skills"])
app.include_router(about.router, prefix="/api/about", tags=["about"])
app.include_router(contacts.router, prefix="/api/contacts", tags=["contacts"])
app.include_router(newsletter.router, prefix="/api/newsletter", tags=["newsletter"])

@app.get("/api/health", tags=["health"])
async def health():
    """Liveness probe."""
    return {
        "status": "OK",
        "message": "Server is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=settings.PORT, reload=settings.is_development)
