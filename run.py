"""
Main entry point for running the application
"""
import uvicorn
from review_relay.core.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "review_relay.api.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
