"""
Main application entry point for the trainassess service.

Usage:
    - Direct: python -m trainassess.main
    - ASGI server: uvicorn trainassess.main:app
"""

from trainassess import create_app
from trainassess.config import get_settings

settings = get_settings()

# Create the FastAPI application
app = create_app(settings)

# Entry point for running the application directly
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "trainassess.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.RELOAD,
        log_level=settings.LOG_LEVEL.lower()
    )
