# app/main.py
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
import logging
from contextlib import asynccontextmanager

from app.config import settings
from app.core.errors import AppError
from app.api.routes import carts as cart_routes
from app.api.routes import users as user_routes
from app.api.routes import products as product_routes
from app.api.routes import threads as thread_routes
from app.api.routes import appointments as appointment_routes
from app.api.routes import payments as payment_routes
from app.middleware.cors_config import configure_cors


logger = logging.getLogger("uvicorn.error")
logging.getLogger("app").setLevel(settings.LOG_LEVEL.upper())


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context: make sure the data directory exists before serving.
    """
    # --- startup logic ---
    data_dir = settings.DATA_DIR
    data_dir.mkdir(parents=True, exist_ok=True)
    logger.info("PetVerse API (%s) using data directory %s", settings.ENV, data_dir.resolve())
    yield
    # --- shutdown logic ---
    logger.info("Shutting down PetVerse API")

app = FastAPI(title="PetVerse API", version="0.1.0", lifespan=lifespan)
configure_cors(app)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message, exc_info=exc)
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_dict()))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # malformed bodies are reported as 400 with the field errors
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"message": "Invalid request body", "errors": errors})


# Include API routers
app.include_router(user_routes.router)
app.include_router(product_routes.router)
app.include_router(cart_routes.router)
app.include_router(thread_routes.router)
app.include_router(appointment_routes.grooming_router)
app.include_router(appointment_routes.healthcare_router)
app.include_router(payment_routes.router)


@app.get("/", tags=["root"])
async def root():
    return {"status": "ok", "service": "PetVerse API"}
