# perfcheck/main.py
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import List, Optional

from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, Response
from fastapi.templating import Jinja2Templates
from starlette.concurrency import run_in_threadpool

from . import __version__
from .audit import AuditRunner, build_runner, metric_mapping
from .charts import render_history_png
from .config import Settings, get_settings
from .dashboard import DEFAULT_METRIC, METRICS, build_dashboard, get_metric
from .errors import PerfCheckError, StoreError
from .schemas import CheckRequest, ErrorOut, ReportOut
from .service import ReportService
from .services.logger import configure_logging
from .store import ReportStore

logger = logging.getLogger(__name__)


# ---------------------------
# Paths & Templates
# ---------------------------
APP_DIR = Path(__file__).resolve().parent
TEMPLATES_DIR = APP_DIR / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def _service(request: Request) -> ReportService:
    return request.app.state.service


@asynccontextmanager
async def lifespan(app: FastAPI):
    store: ReportStore = app.state.store
    await run_in_threadpool(store.open)
    try:
        yield
    finally:
        store.close()


# ---------------------------
# Error responses
# ---------------------------
async def perfcheck_error_handler(request: Request, exc: PerfCheckError) -> JSONResponse:
    if exc.kind != "validation":
        logger.error("%s %s failed (%s): %s", request.method, request.url.path, exc.kind, exc.message, exc_info=exc)
    else:
        logger.warning("%s %s rejected (%s): %s", request.method, request.url.path, exc.kind, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message, "kind": exc.kind})


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning("%s %s rejected: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(status_code=500, content={"error": "Send JSON like {\"url\": \"https://example.com\"}", "kind": "validation"})


def create_app(
    settings: Optional[Settings] = None,
    runner: Optional[AuditRunner] = None,
    store: Optional[ReportStore] = None,
) -> FastAPI:
    if settings is None:
        settings = get_settings()
    configure_logging(settings.LOG_LEVEL)

    store = store or ReportStore(settings.DATABASE_URL, echo=settings.DB_ECHO)
    runner = runner or build_runner(settings)

    app = FastAPI(title=settings.APP_NAME, version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store
    app.state.service = ReportService(
        runner=runner,
        store=store,
        mapping=metric_mapping(settings),
        audit_timeout=settings.AUDIT_TIMEOUT,
    )

    origins = settings.cors_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(PerfCheckError, perfcheck_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    # ---------------------------
    # Pages
    # ---------------------------
    @app.get("/", response_class=HTMLResponse)
    async def index(request: Request):
        error = None
        try:
            reports = await _service(request).list_reports()
        except StoreError as e:
            logger.error("Dashboard could not load reports: %s", e)
            reports, error = [], str(e)
        return templates.TemplateResponse(
            request,
            "index.html",
            {"app_name": settings.APP_NAME, "dashboard": build_dashboard(reports), "error": error},
        )

    @app.get("/dashboard", response_class=HTMLResponse)
    async def dashboard_fragment(request: Request, metric: str = Query(DEFAULT_METRIC)):
        reports = await _service(request).list_reports()
        return templates.TemplateResponse(
            request,
            "_dashboard.html",
            {"dashboard": build_dashboard(reports, active_metric=metric)},
        )

    @app.get("/healthz")
    async def healthz():
        return {"ok": True, "app": "perfcheck", "runner": runner.name}

    # ---------------------------
    # API
    # ---------------------------
    @app.post(
        "/api/check",
        response_model=ReportOut,
        responses={500: {"model": ErrorOut}},
    )
    async def check(request: Request, payload: CheckRequest):
        return await _service(request).submit(payload.url)

    @app.get(
        "/api/reports",
        response_model=List[ReportOut],
        responses={500: {"model": ErrorOut}},
    )
    async def list_reports(request: Request):
        return await _service(request).list_reports()

    @app.get(
        "/api/reports/history.png",
        response_class=Response,
        responses={200: {"content": {"image/png": {}}}, 400: {"model": ErrorOut}},
    )
    async def history_chart(request: Request, metric: str = Query(DEFAULT_METRIC)):
        option = get_metric(metric)
        if option is None:
            choices = ", ".join(m.key for m in METRICS)
            return JSONResponse(
                status_code=400,
                content={"error": f"Unknown metric '{metric}'. Use one of: {choices}", "kind": "validation"},
            )
        reports = await _service(request).list_reports()
        png = await run_in_threadpool(render_history_png, reports, option)
        return Response(content=png, media_type="image/png")

    return app


def __getattr__(name: str):
    # Built on first access so importing this module never reads .env
    if name == "app":
        app = create_app()
        globals()["app"] = app
        return app
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


# ---------------------------
# Run Uvicorn (local dev)
# ---------------------------
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("perfcheck.main:app", host="0.0.0.0", port=get_settings().PORT, reload=True)
