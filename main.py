import socketio
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

import models  # noqa: F401  (registers every table on Base.metadata)
from config import settings
from database import Base, SessionLocal, engine
from realtime.server import create_socket_server
from routes import auth, join_requests, messages, trips, users
from services.errors import ServiceError
from services.trips import sync_trip_statuses
from utils.dates import iso, utc_now
from utils.logger import setup_api_logger
from utils.rate_limit import FixedWindowLimiter, RateLimitMiddleware

# setup file logger for API failures
api_logger = setup_api_logger(settings.LOG_PATH or None)

Base.metadata.create_all(bind=engine)

# Persist date-derived trip statuses once per process start
try:
    with SessionLocal() as db:
        sync_trip_statuses(db)
except SQLAlchemyError:
    api_logger.exception("Trip status sync failed at startup; statuses are still derived on read")

app = FastAPI(title="HopAlong API (Auth, Users, Trips, Requests, Messages)", version="1.0.0")

app.add_middleware(
    RateLimitMiddleware,
    limiter=FixedWindowLimiter(settings.RATE_LIMIT_MAX_REQUESTS, settings.RATE_LIMIT_WINDOW_SECONDS),
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    log = api_logger.error if exc.status_code >= 500 else api_logger.warning
    log("%s on %s %s | status=%s | error=%s",
        type(exc).__name__, request.method, request.url.path, exc.status_code, exc.message)
    return _error(exc.status_code, exc.message)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    api_logger.warning("HTTPException on %s %s | status=%s | detail=%s",
                       request.method, request.url.path, exc.status_code, str(exc.detail))
    return _error(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        message = str(first.get("msg", message)).replace("Value error, ", "")
        field = first.get("loc", ())[-1] if first.get("loc") else None
        if isinstance(field, str) and field not in ("body", "query", "path"):
            message = f"{field}: {message}"
    api_logger.warning("Validation error on %s %s | error=%s", request.method, request.url.path, message)
    return _error(400, message)


@app.exception_handler(OperationalError)
async def database_unavailable_handler(request: Request, exc: OperationalError):
    api_logger.error("Database unavailable on %s %s | error=%s", request.method, request.url.path, str(exc))
    return _error(503, "Database unavailable")


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    api_logger.exception("Unhandled exception on %s %s | error=%s", request.method, request.url.path, str(exc))
    return _error(500, "Server error")


@app.get("/api/health")
def health():
    return {"success": True, "message": "Server is running", "timestamp": iso(utc_now())}


@app.get("/")
def root():
    return {
        "success": True,
        "message": "Welcome to HopAlong API",
        "version": "1.0.0",
        "endpoints": {
            "auth": "/api/auth",
            "users": "/api/users",
            "trips": "/api/trips",
            "requests": "/api/requests",
            "messages": "/api/messages",
        },
    }


app.include_router(auth.router)
app.include_router(users.router)
app.include_router(trips.router)
app.include_router(join_requests.router)
app.include_router(messages.router)

# Socket.IO shares the process; REST and relay are independent
relay = create_socket_server(settings.allowed_origins)
app.state.relay = relay
asgi_app = socketio.ASGIApp(relay.server, other_asgi_app=app, socketio_path="socket.io")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(asgi_app, host="0.0.0.0", port=settings.PORT)
