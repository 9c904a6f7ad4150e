from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status, APIRouter
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from app.config.database import engine, Base, settings
from app.config.redis_config import redis_config
from app.routes import doctor, appointment
from app.services.notification_service import (
    NotificationDispatcher,
    RecordingNotifier,
    RedisNotificationQueue,
)
from app.utils.errors import SchedulingError
import app.models as models  # noqa: F401  registers the tables on Base.metadata
import logging

logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger("api")


def build_notifier():
    if settings.notification_backend == "memory":
        return RecordingNotifier()
    return RedisNotificationQueue()


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    app.state.notification_dispatcher = NotificationDispatcher(
        build_notifier(),
        max_workers=settings.notification_workers
    )
    logger.info(f"{settings.api_title} started (notifications: {settings.notification_backend})")
    yield
    app.state.notification_dispatcher.shutdown()
    redis_config.close()


app = FastAPI(
    title=settings.api_title,
    description="""
    Medical Appointment Scheduling API

    ### Features:
    * **Schedules**: Weekly working windows per doctor, split into fixed-length slots
    * **Availability**: Free slots per date, specialty and doctor
    * **Booking**: Validated against working hours, slot alignment and agenda blocks
    * **Lifecycle**: Reschedule, cancel, complete and no-show

    ### Business Rules:
    * At most **one active appointment per doctor, date and start time**
    * At most **one active appointment per patient, doctor and date**
    * Slot duration between **15 and 120 minutes** (default 30)
    """,
    version=settings.api_version,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SchedulingError)
async def scheduling_exception_handler(request: Request, exc: SchedulingError):
    error = {
        "code": exc.status_code,
        "message": exc.message,
        "type": "SchedulingError",
        "kind": exc.kind.value
    }
    if exc.details is not None:
        error["details"] = exc.details
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": error, "data": None}
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": {
                "code": exc.status_code,
                "message": exc.detail,
                "type": "HTTPException"
            },
            "data": None
        }
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = []
    for error in exc.errors():
        errors.append({
            "field": " -> ".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"]
        })

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "success": False,
            "error": {
                "code": 422,
                "message": "Validation Error",
                "type": "ValidationError",
                "details": errors
            },
            "data": None
        }
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "error": {
                "code": 500,
                "message": "Internal server error",
                "type": "InternalError"
            },
            "data": None
        }
    )


system_router = APIRouter(prefix="/api", tags=["System"])

@system_router.get("/health")
def health_check():
    """Health check endpoint for monitoring"""
    return {
        "success": True,
        "data": {
            "status": "healthy",
            "service": "scheduling-api",
            "version": settings.api_version
        }
    }

@app.get("/api/v1/status", tags=["System"])
def api_status():
    """Detailed API status information"""
    return {
        "success": True,
        "data": {
            "api_version": settings.api_version,
            "status": "operational",
            "limits": {
                "default_slot_duration_minutes": settings.default_slot_duration,
                "min_slot_duration_minutes": settings.min_slot_duration,
                "max_slot_duration_minutes": settings.max_slot_duration
            }
        }
    }

app.include_router(system_router)

app.include_router(doctor.router, prefix="/api/v1")
app.include_router(appointment.router, prefix="/api/v1")

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=settings.log_level
    )
