from fastapi.middleware.cors import CORSMiddleware

from app.config import settings


def configure_cors(app):
    origins = settings.allowed_origins
    if not origins:
        origins = ["http://localhost:5173"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        max_age=86400,
    )
