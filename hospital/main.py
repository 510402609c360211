"""
Main FastAPI application entry point.
Configures the application, middleware, and includes routers.
"""
from dotenv import load_dotenv

# Load environment variables from .env file first
load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging
from .auth.router import router as auth_router
from .admin.router import router as admin_router
from .database import Base, SessionLocal, engine
from .config import settings
# Import all models here for creating tables
from .auth import models as auth_models  # noqa: F401
from .patients import models as patient_models  # noqa: F401
from .core import audit_models  # noqa: F401
from .exceptions import register_exception_handlers
from .core.middleware import setup_middlewares
from .core.bootstrap import bootstrap_admin_if_needed

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Create database tables if they don't exist
Base.metadata.create_all(bind=engine)

# Bootstrap admin creation
logger.info("Starting Hospital Management API...")
db = SessionLocal()
try:
    bootstrap_admin_if_needed(db)
except Exception as e:
    logger.error(f"Bootstrap process failed: {str(e)}")
finally:
    db.close()

# Create FastAPI application
app = FastAPI(
    title="Hospital Management API",
    description="Authentication and account API for the hospital management portals",
    version="1.0.0"
)

# Register exception handlers
register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Setup custom middleware
setup_middlewares(app)

# Include routers
app.include_router(auth_router)
app.include_router(admin_router)

# Root endpoint
@app.get("/")
def root():
    """
    Root endpoint for API health check.

    Returns:
        dict: Simple welcome message
    """
    return {"message": "Welcome to Hospital Management API", "version": app.version}

# Health check endpoint
@app.get("/api/health")
async def health_check():
    """
    Health check endpoint for monitoring.

    Returns:
        dict: Health status information
    """
    return {"status": "healthy"}
