"""CORS middleware configuration"""
from fastapi.middleware.cors import CORSMiddleware
from forms_api.config import get_settings


def setup_cors(app):
    """
    Configure CORS middleware for the application

    The form pages post JSON and multipart bodies from the browser, so only
    POST and the preflight are needed.

    Args:
        app: FastAPI application instance
    """
    settings = get_settings()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )
