"""
FastAPI application for the service desk.

Routes live on an APIRouter under /api; the services they call are built once
in create_app() and kept on app.state.
"""

import asyncio
import json
import logging
import re
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Tuple

from fastapi import APIRouter, BackgroundTasks, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .adapters.sms import SMSAdapter
from .config import Settings, get_settings
from .core import RecordsService, SubmissionService
from .exceptions import ServiceDeskError
from .logging_conf import configure_logging
from .services.store import JsonStore

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")
FORM_KEY = re.compile(r"^([^\[\]]+)((?:\[[^\[\]]*\])+)$")
FORM_KEY_SEGMENT = re.compile(r"\[([^\[\]]*)\]")

router = APIRouter(prefix="/api")


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"ok": False, "message": message})


def _as_lists(node: Any) -> Any:
    if not isinstance(node, dict):
        return node
    items = {key: _as_lists(value) for key, value in node.items()}
    if items and all(key.isdigit() for key in items):
        return [items[key] for key in sorted(items, key=int)]
    return items


def nest_form_fields(items: Iterable[Tuple[str, Any]]) -> Dict[str, Any]:
    """Expand bracketed form keys such as parts[0][name] into nested dicts and lists."""
    data: Dict[str, Any] = {}
    for key, value in items:
        match = FORM_KEY.match(key)
        path = [match.group(1)] + FORM_KEY_SEGMENT.findall(match.group(2)) if match else [key]
        node = data
        for segment in path[:-1]:
            child = node.get(segment)
            if not isinstance(child, dict):
                child = node[segment] = {}
            node = child
        # parts[]=x appends
        node[path[-1] or str(len(node))] = value
    return {key: _as_lists(value) for key, value in data.items()}


async def read_payload(request: Request) -> Dict[str, Any]:
    """Request body as a dict: JSON or form encoded; anything else becomes {}."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        return nest_form_fields(form.multi_items())

    body = await request.body()
    if not body:
        return {}
    try:
        data = json.loads(body)
    except ValueError:
        logger.info(f"Ignoring unparseable body on {request.url.path}")
        return {}
    return data if isinstance(data, dict) else {}


def _submissions(request: Request) -> SubmissionService:
    return request.app.state.submissions


def _records(request: Request) -> RecordsService:
    return request.app.state.records


@router.get("/health")
async def health_check():
    return {"ok": True}


@router.post("/login")
async def login(request: Request):
    _records(request).login(await read_payload(request))
    return {"ok": True}


@router.post("/appointments")
async def create_appointment(request: Request, background_tasks: BackgroundTasks):
    record = await _submissions(request).create_appointment(await read_payload(request), background_tasks)
    return {"ok": True, "record": record}


@router.post("/spares")
async def create_spare_request(request: Request, background_tasks: BackgroundTasks):
    record = await _submissions(request).create_spare_request(await read_payload(request), background_tasks)
    return {"ok": True, "record": record}


@router.post("/feedback")
async def create_feedback(request: Request):
    record = await _submissions(request).create_feedback(await read_payload(request))
    return {"ok": True, "record": record}


@router.get("/feedback")
async def list_feedback(request: Request):
    records = await _records(request).list_feedback()
    return {"ok": True, "records": records}


@router.post("/contact")
async def create_contact(request: Request):
    await _submissions(request).create_contact(await read_payload(request))
    return {"ok": True}


@router.get("/customer-records")
async def list_customer_records(request: Request):
    records = await _records(request).list_customer_records()
    return {"ok": True, "records": records}


@router.delete("/customer-records/{record_id}")
async def delete_customer_record(record_id: str, request: Request):
    await _records(request).delete_customer_record(record_id)
    return {"ok": True}


def _log_async_failure(loop: asyncio.AbstractEventLoop, context: Dict[str, Any]) -> None:
    exc = context.get("exception")
    logger.warning(f"Unhandled async failure: {exc if exc is not None else context.get('message')}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    # plain `uvicorn service_desk.server:app`; the launcher configures logging itself
    if not logging.getLogger().handlers:
        configure_logging(settings.LOG_LEVEL, settings.LOG_JSON)
    data_dir = app.state.store.ensure_data_dir()
    asyncio.get_running_loop().set_exception_handler(_log_async_failure)
    logger.info(f"🚀 Service desk running on http://localhost:{settings.PORT} (data: {data_dir})")
    yield
    logger.info("👋 Shutting down service desk")


def create_app(settings: Optional[Settings] = None, sms: Optional[SMSAdapter] = None) -> FastAPI:
    settings = settings or get_settings()
    store = JsonStore(settings.DATA_DIR)
    sms = sms or SMSAdapter(settings)

    app = FastAPI(title="Auto Service Desk", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store
    app.state.sms = sms
    app.state.submissions = SubmissionService(store, sms, settings)
    app.state.records = RecordsService(store, settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    @app.exception_handler(ServiceDeskError)
    async def service_desk_error_handler(request: Request, exc: ServiceDeskError):
        if exc.status_code == 400:
            logger.info(f"Rejected {request.method} {request.url.path}: {exc.message}")
        return _error(exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return _error(exc.status_code, str(exc.detail))

    app.include_router(router)

    static_dir = Path(settings.STATIC_DIR)

    @app.get("/", include_in_schema=False)
    async def login_page():
        page = static_dir / settings.LOGIN_PAGE
        if not page.is_file():
            return _error(404, "Login page not found.")
        return FileResponse(page)

    @app.post("/spare.html", include_in_schema=False)
    async def spare_form_post():
        return RedirectResponse(url="/spare.html", status_code=303)

    # Mounted last so /api routes always win
    if static_dir.is_dir():
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")
    else:
        logger.warning(f"Static directory {static_dir} not found; static pages disabled")

    return app


app = create_app()
