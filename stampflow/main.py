# stampflow/main.py
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stampflow.api import routers
from stampflow.core.config import get_settings
from stampflow.core.logging import configure_logging
from stampflow.services.suggestion_service import TextSuggestionAdapter, build_suggestion_client

# === إعدادات وتسجيل ===
settings = get_settings()
logger = configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    # عميل الاقتراحات يُنشأ مرة واحدة ويملكه التطبيق، وليس متغيرًا عامًا في الخدمة.
    client = build_suggestion_client(settings)
    app.state.suggestion_adapter = TextSuggestionAdapter(client)
    try:
        yield
    finally:
        if client is not None and hasattr(client, "__exit__"):
            client.__exit__(None, None, None)


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    lifespan=lifespan,
)

# === CORS ===
allow_origins = [origin.strip() for origin in settings.allow_origins if origin.strip()] or ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"],  # لقراءة اسم الملف الناتج من الترويسة
)

# === Routers ===
for router in routers:
    app.include_router(router)


# === Basic endpoints ===
@app.get("/")
async def root() -> dict:
    logger.debug("Root endpoint accessed")
    return {"message": f"Welcome to {settings.app_name}"}


@app.get("/health")
async def health_check() -> dict:
    logger.debug("Health check invoked")
    return {"status": "ok", "message": f"{settings.app_name} is running"}
