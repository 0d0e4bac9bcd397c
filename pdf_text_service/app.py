import hmac
import json
import logging

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from mangum import Mangum

from . import __version__
from .config import Settings
from .errors import BadRequest, PayloadTooLarge, ServiceError, Unauthorized, describe
from .extractor import extract_pdf, normalize_whitespace
from .fetcher import fetch_pdf

logger = logging.getLogger(__name__)

# alias route over the same pipeline: {"file_url": ...} body, secret in x-api-key
ALIAS_PATH = "/extract"
ALIAS_URL_FIELD = "file_url"
ALIAS_SECRET_HEADER = "x-api-key"


# ─── tiny helpers ─────────────────────────────────────────────────────────
def response(status: int, payload: dict) -> JSONResponse:
    return JSONResponse(status_code=status, content=payload)


def check_secret(settings: Settings, presented: str | None) -> None:
    if not settings.auth_enabled:
        return
    if presented is None or not hmac.compare_digest(
        presented.encode("utf-8"), settings.service_secret.encode("utf-8")
    ):
        raise Unauthorized()


async def read_json_body(request: Request, max_bytes: int):
    raw = bytearray()
    async for chunk in request.stream():
        raw += chunk
        if len(raw) > max_bytes:
            raise PayloadTooLarge()
    if not raw:
        return {}
    try:
        return json.loads(raw)
    except ValueError:
        return {}


def require_url(body, url_field: str) -> str:
    url = body.get(url_field) if isinstance(body, dict) else None
    if not url or not isinstance(url, str):
        raise BadRequest(f"Missing {url_field}")
    return url


# ─── the pipeline: auth → fetch → parse → normalize → respond ─────────────
async def run_extraction(request: Request, url_field: str, secret_header: str) -> JSONResponse:
    settings: Settings = request.app.state.settings
    url = None
    try:
        check_secret(settings, request.headers.get(secret_header))

        body = await read_json_body(request, settings.max_body_bytes)
        url = require_url(body, url_field)

        logger.info("Fetching PDF: %s", url)
        pdf_bytes = await run_in_threadpool(
            fetch_pdf, url, settings.fetch_timeout, settings.max_pdf_bytes
        )

        result = await run_in_threadpool(extract_pdf, pdf_bytes)
        text = normalize_whitespace(result.text)
        logger.info("Extracted text length: %d pages: %s", len(text), result.page_count)

        return response(200, {
            "ok": True,
            "text": text,
            "pages": result.page_count or None,
            "info": result.info or None,
        })

    except ServiceError as e:
        logger.warning("%s %s → %s %s", request.url.path, url, e.status, e.message)
        return response(e.status, {"ok": False, "error": e.message})
    except Exception as e:
        logger.exception("Extraction failed for %s", url)
        return response(500, {"ok": False, "error": describe(e)})


def _extraction_endpoint(url_field: str, secret_header: str):
    async def endpoint(request: Request):
        return await run_extraction(request, url_field, secret_header)
    return endpoint


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logging.getLogger("pdf_text_service").setLevel(level)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings.from_env()

    app = FastAPI(title=settings.service_name, version=__version__)
    app.state.settings = settings

    @app.middleware("http")
    async def limit_body_size(request: Request, call_next):
        length = request.headers.get("content-length")
        if length and length.isdigit() and int(length) > settings.max_body_bytes:
            logger.warning("Rejected %s: body of %s bytes", request.url.path, length)
            return response(413, {"ok": False, "error": PayloadTooLarge().message})
        return await call_next(request)

    @app.get("/")
    async def liveness():
        return {"ok": True, "service": settings.service_name}

    app.add_api_route(
        settings.extract_path,
        _extraction_endpoint(settings.url_field, settings.secret_header),
        methods=["POST"],
    )
    if settings.extract_path != ALIAS_PATH:
        app.add_api_route(
            ALIAS_PATH,
            _extraction_endpoint(ALIAS_URL_FIELD, ALIAS_SECRET_HEADER),
            methods=["POST"],
        )

    logger.info(
        "%s ready (auth %s)", settings.service_name,
        "enabled" if settings.auth_enabled else "disabled",
    )
    return app


_lambda_handler = None


def handler(event, context):
    """Lambda entry point; the app is built on the first invocation."""
    global _lambda_handler
    if _lambda_handler is None:
        settings = Settings.from_env()
        configure_logging(settings.log_level)
        _lambda_handler = Mangum(create_app(settings))
    return _lambda_handler(event, context)


def main():
    import uvicorn

    settings = Settings.from_env()
    configure_logging(settings.log_level)
    app = create_app(settings)
    logger.info("%s running on port %s", settings.service_name, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
