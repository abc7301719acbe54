# portal/main.py
import os
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from portal.api.deps import shutdown_services
from portal.api.routes import jobs, notifications, resumes, users
from portal.config import Config
from portal.errors import PortalError

# Configure logging
logging.basicConfig(level=Config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s %(message)s")
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # let queued emails go out before the process exits
    shutdown_services()


# Initialize FastAPI app
app = FastAPI(
    title="Recruitment Intake Portal",
    description="Agencies submit resumes against job openings; admins triage them",
    version="1.0.0",
    lifespan=lifespan
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=Config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PortalError)
async def portal_error_handler(request: Request, exc: PortalError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message, "error": type(exc).__name__})


# Include API routers
app.include_router(users.router, prefix="/api", tags=["Users"])
app.include_router(jobs.router, prefix="/api", tags=["Jobs"])
app.include_router(resumes.router, prefix="/api", tags=["Resumes"])
app.include_router(notifications.router, prefix="/api", tags=["Notifications"])

os.makedirs(Config.UPLOAD_DIR, exist_ok=True)
app.mount(Config.UPLOAD_URL_PREFIX, StaticFiles(directory=Config.UPLOAD_DIR), name="uploads")


@app.get("/")
async def root():
    return {"status": "active", "message": "Recruitment Intake Portal is running"}


def run():
    import uvicorn
    uvicorn.run("portal.main:app", host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", 8000)))


if __name__ == "__main__":
    run()
