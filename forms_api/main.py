"""Main FastAPI application"""
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from forms_api.config import get_settings
from forms_api.middleware.cors import setup_cors
from forms_api.middleware.error_handler import setup_error_handlers
from contextlib import asynccontextmanager
from pathlib import Path
import logging

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    upload_dir = Path(settings.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    logger.info(f"Serving uploads from {upload_dir.resolve()} ({settings.environment})")
    yield
    # Shutdown
    logger.info("Forms API stopped")


# Create FastAPI app with lifespan
app = FastAPI(
    title="Accessible Forms API",
    description="Submission endpoints for the contact, multi-step, dynamic and file-upload forms",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# Setup CORS
setup_cors(app)

# Add error handling
setup_error_handlers(app)

# Stored uploads are public, read-only
app.mount(
    settings.upload_url_prefix,
    StaticFiles(directory=settings.upload_dir, check_dir=False),
    name="uploads",
)

# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "forms-api"}

@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "Accessible Forms API",
        "version": "1.0.0",
        "docs": "/docs"
    }

# Import and include routers
from forms_api.routers import forms, uploads

app.include_router(forms.router, prefix="/api/forms", tags=["Forms"])
app.include_router(uploads.router, prefix="/api/forms", tags=["File Uploads"])

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
