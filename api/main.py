"""
FastAPI pass-through proxy for the OpenWeatherMap API.

Injects the server-side credential, mirrors upstream status and body and
marks successful responses as publicly cacheable. No business logic.
"""
import logging
import os
import time
import uuid
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

import requests
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from utils.logging_config import log_request, setup_logging
from utils.metrics import (
    get_content_type,
    get_metrics,
    proxy_request_counter,
    proxy_request_duration,
    set_app_info,
)
from weather_widget import __version__

# Setup logging
setup_logging(os.getenv("LOG_LEVEL", "INFO"), service="weather-proxy")
logger = logging.getLogger(__name__)

UPSTREAM_BASE_URL = "https://api.openweathermap.org"
UPSTREAM_TIMEOUT = 10

WEATHER_CACHE_CONTROL = "public, max-age=600"
GEO_CACHE_CONTROL = "public, max-age=3600"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan event handler."""
    logger.info("Weather proxy starting up")

    if os.getenv("OPENWEATHERMAP_API_KEY"):
        logger.info("OPENWEATHERMAP_API_KEY is configured")
    else:
        # Requests will fail with 500 until the key is set
        logger.warning("OPENWEATHERMAP_API_KEY is not set")

    set_app_info(version=__version__, environment=os.getenv("DEPLOYMENT_ENV", "local"))

    yield

    logger.info("Weather proxy shutting down")


app = FastAPI(
    title="Weather Widget Proxy",
    description="Credential-injecting pass-through to OpenWeatherMap",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET"],
    allow_headers=["*"],
)


@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
    """Collect Prometheus metrics for proxied requests."""
    path = request.url.path
    if path == "/metrics":
        return await call_next(request)

    start_time = time.time()
    response = await call_next(request)
    duration = time.time() - start_time

    # Normalize route for metrics (drop endpoint names)
    if path.startswith("/api/weather"):
        route = "/api/weather"
    elif path.startswith("/api/geo"):
        route = "/api/geo"
    else:
        route = path

    proxy_request_counter.labels(route=route, status_code=response.status_code).inc()
    proxy_request_duration.labels(route=route).observe(duration)

    return response


def _upstream_url(endpoint: str) -> str:
    """Map 'forecast' to data/2.5 and 'geo/direct' to geo/1.0."""
    endpoint = endpoint.strip("/")
    if endpoint.startswith("geo/"):
        return f"{UPSTREAM_BASE_URL}/geo/1.0/{endpoint[len('geo/'):]}"
    return f"{UPSTREAM_BASE_URL}/data/2.5/{endpoint}"


def _cache_control(endpoint: str) -> str:
    if endpoint.strip("/").startswith("geo/"):
        return GEO_CACHE_CONTROL
    return WEATHER_CACHE_CONTROL


def forward(url: str, params: Dict[str, Any], cache_control: str) -> Response:
    """Forward a GET upstream with the credential injected."""
    request_id = str(uuid.uuid4())
    start_time = time.time()

    api_key = os.getenv("OPENWEATHERMAP_API_KEY")
    if not api_key:
        return JSONResponse(status_code=500, content={"error": "API key not configured"})

    upstream_params = {k: v for k, v in params.items() if v is not None and k != "appid"}
    upstream_params["appid"] = api_key

    try:
        upstream = requests.get(url, params=upstream_params, timeout=UPSTREAM_TIMEOUT)
    except requests.RequestException as e:
        duration_ms = int((time.time() - start_time) * 1000)
        log_request(
            logger,
            request_id,
            "proxy",
            duration_ms,
            "error",
            f"Upstream request failed: {e}",
            level=logging.ERROR,
        )
        return JSONResponse(status_code=500, content={"error": str(e)})

    try:
        body = upstream.json()
    except ValueError:
        body = {"error": "Invalid JSON from upstream"}

    duration_ms = int((time.time() - start_time) * 1000)
    log_request(
        logger,
        request_id,
        "proxy",
        duration_ms,
        str(upstream.status_code),
        f"Proxied {url}",
    )

    if not 200 <= upstream.status_code < 300:
        return JSONResponse(status_code=upstream.status_code, content=body)

    return JSONResponse(
        status_code=upstream.status_code,
        content=body,
        headers={"Cache-Control": cache_control},
    )


@app.get("/health")
def health_check():
    return {"status": "ok"}


@app.get("/metrics")
def metrics_endpoint():
    """Prometheus metrics endpoint."""
    return Response(content=get_metrics(), media_type=get_content_type())


@app.get("/api/weather")
def weather_by_query(request: Request, endpoint: Optional[str] = None):
    """``?endpoint=forecast&lat=..&lon=..`` form."""
    if not endpoint:
        return JSONResponse(
            status_code=400, content={"error": "Missing endpoint parameter"}
        )
    params = {k: v for k, v in request.query_params.items() if k != "endpoint"}
    return forward(_upstream_url(endpoint), params, _cache_control(endpoint))


@app.get("/api/weather/{endpoint:path}")
def weather_endpoint(endpoint: str, request: Request):
    """Path form; ``geo/...`` endpoints route to geo/1.0 as in the query form."""
    params = dict(request.query_params)
    return forward(_upstream_url(endpoint), params, _cache_control(endpoint))


@app.get("/api/geo/{endpoint}")
def geo_endpoint(endpoint: str, request: Request):
    params = dict(request.query_params)
    if not params.get("q"):
        return JSONResponse(
            status_code=400, content={"error": "Missing city name parameter"}
        )
    params.setdefault("limit", "5")
    return forward(f"{UPSTREAM_BASE_URL}/geo/1.0/{endpoint}", params, GEO_CACHE_CONTROL)


def main():
    import uvicorn

    port = int(os.getenv("PORT", 5000))
    uvicorn.run(app, host="0.0.0.0", port=port, log_level="info")


if __name__ == "__main__":
    main()
