"""Stripe Payment Monitor - FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from app.config import settings
from app.dependencies import build_dispatcher
from app.logs import LogSink
from app.routers import health, logs, manual, status, webhooks


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.log_sink.append(f"Stripe Payment Monitor started on port {settings.port}")
    yield


app = FastAPI(
    title="Stripe Payment Monitor",
    description="Monitors Stripe for failed payments, sends Gmail alerts, and updates Airtable",
    version="0.1.0",
    lifespan=lifespan,
)

app.state.log_sink = LogSink()
app.state.dispatcher = build_dispatcher(settings, app.state.log_sink)

# Rate limiting (manual test trigger only)
app.state.limiter = manual.limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    request.app.state.log_sink.append(f"Unhandled error: {exc}", logging.ERROR)
    return JSONResponse(status_code=500, content={"error": "Internal Server Error"})


app.include_router(status.router, tags=["status"])
app.include_router(health.router)
app.include_router(logs.router, tags=["logs"])
app.include_router(manual.router, tags=["test"])
app.include_router(webhooks.router, tags=["webhooks"])
