import logging
import os
from pathlib import Path
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.templating import Jinja2Templates
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__, intake
from .config import Settings
from .editors import BaseImageEditor, get_editor
from .generation import GenerationEndpoint, UploadedImage
from .models import GenerateError, GenerateSuccess

# Configure logging
logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def uploaded_image_from(upload: UploadFile) -> UploadedImage:
    """Wrap a Starlette upload for the framework-free endpoint."""
    size = upload.size
    if size is None:
        upload.file.seek(0, os.SEEK_END)
        size = upload.file.tell()

    def read() -> bytes:
        upload.file.seek(0)
        return upload.file.read()

    return UploadedImage(
        filename=upload.filename,
        content_type=upload.content_type,
        size=size,
        reader=read,
    )


def create_app(
    settings: Optional[Settings] = None,
    editor_factory: Callable[[Settings], BaseImageEditor] = get_editor,
) -> FastAPI:
    """
    Build the web application.

    Args:
        settings: Configuration; read from the environment when omitted
        editor_factory: Builds the image editor used by /api/generate
    """
    if settings is None:
        settings = Settings.from_env()

    app = FastAPI(
        title="Ghiblify",
        description="Turn an uploaded image into a Studio Ghibli style rendering",
        version=__version__,
    )
    endpoint = GenerationEndpoint(settings, editor_factory)

    if not settings.is_configured():
        logger.warning(f"Image editor not configured. Missing: {', '.join(settings.missing_config())}")

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        """Render framework errors in the same shape as /api/generate errors."""
        logger.warning(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.detail}")
        return JSONResponse(
            {"error": str(exc.detail)},
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
        )

    @app.get("/", response_class=HTMLResponse)
    def read_root(request: Request):
        """
        Serve the upload page.
        """
        return templates.TemplateResponse(
            request,
            "index.html",
            {
                "allowed_types": intake.ALLOWED_MIME_TYPES,
                "accept": ",".join(
                    list(intake.ALLOWED_MIME_TYPES)
                    + [ext for exts in intake.ACCEPTED_EXTENSIONS.values() for ext in exts]
                ),
                "max_size_bytes": intake.MAX_FILE_SIZE_BYTES,
                "max_size_mb": intake.MAX_FILE_SIZE_MB,
                "messages": {reason.value: text for reason, text in intake.REJECTION_MESSAGES.items()},
                "no_file_message": intake.NO_FILE_MESSAGE,
            },
        )

    @app.get("/api/health", tags=["Health"])
    def health():
        """
        Liveness probe.
        """
        return {"status": "ok"}

    @app.post(
        "/api/generate",
        tags=["Generation"],
        responses={
            200: {"model": GenerateSuccess},
            400: {"model": GenerateError},
            405: {"model": GenerateError},
            429: {"model": GenerateError},
            500: {"model": GenerateError},
        },
    )
    async def generate(request: Request):
        """
        Generate a Ghibli-style version of the uploaded image.

        Expects multipart/form-data with a single file in the 'image' field
        (image/png or image/jpeg, at most 4MB).
        """
        async with request.form() as form:
            images = [
                uploaded_image_from(item)
                for item in form.getlist("image")
                if isinstance(item, UploadFile)
            ]
            # The editor call blocks on requests
            response = await run_in_threadpool(endpoint.handle, request.method, images)

        return JSONResponse(response.body, status_code=response.status_code, headers=response.headers)

    async def generate_other_methods(request: Request):
        response = endpoint.handle(request.method, [])
        return JSONResponse(response.body, status_code=response.status_code, headers=response.headers)

    # No method filter: POST fully matches the route above, any other verb lands here
    app.add_route("/api/generate", generate_other_methods, include_in_schema=False)

    return app


app = create_app()
