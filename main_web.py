import uvicorn

from core.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "web.api:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.lower(),
    )
