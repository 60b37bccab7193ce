from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from switch_auth.api.v1 import routers
import logging
from switch_auth.core.config import settings
from switch_auth.core.exceptions import IdentityException
from switch_auth.db.session import connect_db_pool, close_db_pool
from switch_auth.schemas.auth_schema import ErrorResponse

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)


async def identity_exception_handler(request: Request, exc: IdentityException):
    errors = [error.model_dump() for error in getattr(exc, "errors", [])]
    body = ErrorResponse(message=exc.detail, errors=errors)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(), headers=exc.headers)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"], "code": err["type"]}
        for err in exc.errors()
    ]
    body = ErrorResponse(message="Invalid request body", errors=errors)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body.model_dump())


def install_handlers(app: FastAPI) -> None:
    app.add_exception_handler(IdentityException, identity_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await connect_db_pool()
    yield
    await close_db_pool()

app = FastAPI(
    title="Switch Auth API",
    description="Passenger and driver registration, login and profiles",
    version="1.0.0",
    lifespan=lifespan
)

install_handlers(app)
app.include_router(routers.router)

@app.get("/")
async def root():
    return {"message": "Switch Server is running!"}

@app.get("/home")
async def home():
    return {
        "success": True,
        "message": "Welcome to Switch Server!",
        "data": {
            "name": "Switch Server",
            "version": app.version,
            "description": "Backend API server for the Switch transportation platform",
            "endpoints": {"auth": "/api/auth", "home": "/home"},
        },
    }
