"""
NetSight Analyzer API - Main Application

Serves the link calculator, the chart sweeps, PDF reports and AI parameter
suggestions over HTTP.
"""
from __future__ import annotations

import logging
import time

import uvicorn
from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from .calculations import compute_chart_data, compute_metrics, run_simulation
from .config import settings
from .constants import AI_GOALS, BANDWIDTH_MHZ_RANGE, DISTANCE_M_RANGE, INITIAL_PARAMS, NOISE_LEVEL_DBM_RANGE
from .exporters import build_pdf, report_filename
from .logging import bind_request_id, current_request_id, log_request, setup_logging, unbind_request_id
from .models import (
    ChannelCoding,
    ChartDataSet,
    HealthResponse,
    Modulation,
    NetworkType,
    OptionsResponse,
    ReportRequest,
    SimulationMetrics,
    SimulationParameters,
    SimulationResult,
    SuggestionRequest,
    SuggestionResponse,
)
from .suggest import ParameterSuggester, SuggestionError, get_suggester

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="Educational 4G/5G link metrics: path loss, SNR, throughput and BER.",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "X-Requested-With"],
    expose_headers=["Content-Disposition", "X-Request-ID"],
)


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
    # Bound before the handler runs so records logged inside it carry the id
    token = bind_request_id()
    request.state.request_id = current_request_id()
    start = time.perf_counter()
    try:
        try:
            response = await call_next(request)
        except Exception as exc:
            log_request(request, error=exc, duration_ms=(time.perf_counter() - start) * 1000)
            raise
        request_id = log_request(request, response=response, duration_ms=(time.perf_counter() - start) * 1000)
    finally:
        unbind_request_id(token)
    response.headers["X-Request-ID"] = request_id
    return response


api = APIRouter(prefix=settings.API_PREFIX)


@api.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(version=settings.VERSION)


@api.get("/options", response_model=OptionsResponse)
async def options() -> OptionsResponse:
    return OptionsResponse(
        network_types=[n.value for n in NetworkType],
        modulations=[m.value for m in Modulation],
        channel_codings=[c.value for c in ChannelCoding],
        bounds={
            "bandwidth": BANDWIDTH_MHZ_RANGE,
            "distance": DISTANCE_M_RANGE,
            "noise_level": NOISE_LEVEL_DBM_RANGE,
        },
        initial_parameters=SimulationParameters(**INITIAL_PARAMS),
        goals=AI_GOALS,
    )


@api.post("/metrics", response_model=SimulationMetrics)
async def metrics(params: SimulationParameters) -> SimulationMetrics:
    return compute_metrics(params)


@api.post("/charts", response_model=ChartDataSet)
async def charts(params: SimulationParameters) -> ChartDataSet:
    return compute_chart_data(params)


@api.post("/simulate", response_model=SimulationResult)
async def simulate(params: SimulationParameters) -> SimulationResult:
    return run_simulation(params)


# Blocking network call; FastAPI runs sync endpoints in its threadpool
@api.post("/suggest", response_model=SuggestionResponse)
def suggest(
    req: SuggestionRequest,
    suggester: ParameterSuggester = Depends(get_suggester),
) -> SuggestionResponse:
    return suggester.suggest(req)


@api.post("/export/pdf")
async def export_pdf(req: ReportRequest) -> Response:
    result = run_simulation(req.parameters)
    try:
        pdf = build_pdf(result.parameters, result.metrics, result.charts, req.title)
    except Exception as exc:
        logger.error("Report export failed: %s", exc, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to build report")
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{report_filename()}"'},
    )


app.include_router(api)


@app.exception_handler(SuggestionError)
async def suggestion_exception_handler(request: Request, exc: SuggestionError):
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"detail": str(exc)},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)

    # Don't expose internal errors in production
    detail = str(exc) if settings.DEBUG else "Internal server error"
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": detail},
    )


def run() -> None:
    logger.info(f"Starting {settings.PROJECT_NAME} v{settings.VERSION} in {settings.ENVIRONMENT} mode")
    uvicorn.run(
        "netsight.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.RELOAD,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
