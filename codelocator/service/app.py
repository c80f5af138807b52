"""FastAPI application exposing codelocator analysis over HTTP."""

from __future__ import annotations

import asyncio
import time
import uuid
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, BinaryIO, Callable, Dict, Optional, cast

from fastapi import Depends, FastAPI, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..archive import ArchiveError
from ..config import CodeLocatorConfig, load_settings
from ..logging import get_logger
from ..pipeline import AnalysisPipeline, build_report_summary
from ..validation import ValidationError, validate_analysis_request

API_VERSION = "1.0.0"

ENDPOINTS: Dict[str, str] = {
    "analyze": "POST /api/analyze",
    "health": "GET /api/health",
    "info": "GET /api/info",
}

_logger = get_logger("service")


class AnalyzeResponse(BaseModel):
    success: bool
    data: Dict[str, Any]
    summary: Dict[str, Any]
    timestamp: str


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    uptime: float
    provider: str


class RootResponse(BaseModel):
    name: str
    version: str
    status: str
    endpoints: Dict[str, str]


def _timestamp() -> str:
    return datetime.now(UTC).isoformat()


def _store_upload(stream: BinaryIO, upload_dir: Path, limit: int) -> Path:
    """Copy the uploaded archive to a uniquely named file, enforcing the size ceiling."""
    upload_dir.mkdir(parents=True, exist_ok=True)
    target = upload_dir / f"code-{uuid.uuid4()}.zip"
    written = 0
    try:
        with target.open("wb") as handle:
            for chunk in iter(lambda: stream.read(1024 * 1024), b""):
                written += len(chunk)
                if written > limit:
                    raise ValidationError(
                        [f"code_zip exceeds the {limit // (1024 * 1024)}MB upload limit"]
                    )
                handle.write(chunk)
    except BaseException:
        target.unlink(missing_ok=True)
        raise
    return target


def create_app(
    pipeline_factory: Callable[[], AnalysisPipeline] | None = None,
    config: CodeLocatorConfig | None = None,
) -> FastAPI:
    """Create the FastAPI application exposing the analysis endpoints."""
    settings = config or load_settings()
    factory = pipeline_factory or (lambda: AnalysisPipeline(settings))
    started = time.monotonic()

    app = FastAPI(title="codelocator", version=API_VERSION)

    async def get_pipeline() -> AnalysisPipeline:
        # One pipeline per request.
        return factory()

    @app.get("/", response_model=RootResponse)
    async def root() -> RootResponse:
        return RootResponse(name="codelocator", version=API_VERSION, status="running", endpoints=ENDPOINTS)

    @app.get("/api/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(
            status="healthy",
            timestamp=_timestamp(),
            uptime=round(time.monotonic() - started, 3),
            provider=settings.llm.provider,
        )

    @app.get("/api/info")
    async def info() -> Dict[str, Any]:
        return {
            "name": "codelocator",
            "version": API_VERSION,
            "description": (
                "Analyzes an uploaded project archive and reports where the described "
                "features are implemented."
            ),
            "endpoints": {
                "POST /api/analyze": {
                    "description": "Analyze a project archive and return a feature location report",
                    "parameters": {
                        "problem_description": "string (form field) - features to locate",
                        "code_zip": "file (multipart) - zipped project sources",
                        "include_verification": "boolean (optional) - attach generated verification tests",
                    },
                },
                "GET /api/health": {"description": "Service health"},
                "GET /api/info": {"description": "This document"},
            },
            "provider": settings.llm.provider,
            "max_upload_bytes": settings.storage.max_upload_bytes,
        }

    @app.post("/api/analyze", response_model=AnalyzeResponse)
    async def analyze(
        problem_description: Optional[str] = Form(None),
        include_verification: bool = Form(False),
        code_zip: Optional[UploadFile] = File(None),
        pipeline: AnalysisPipeline = Depends(get_pipeline),
    ) -> AnalyzeResponse:
        has_archive = code_zip is not None and bool(code_zip.filename)
        description = validate_analysis_request(
            problem_description,
            has_archive=has_archive,
            upload_size=getattr(code_zip, "size", None),
            max_upload_bytes=settings.storage.max_upload_bytes,
        )
        # Validation guarantees an archive part is present.
        upload = cast(UploadFile, code_zip)

        def _run_analysis() -> Dict[str, Any]:
            archive_path = _store_upload(
                upload.file, settings.storage.upload_dir, settings.storage.max_upload_bytes
            )
            try:
                return pipeline.run(
                    description, archive_path, include_verification=include_verification
                )
            finally:
                archive_path.unlink(missing_ok=True)

        _logger.info("Analysis requested (verification=%s)", include_verification)
        loop = asyncio.get_running_loop()
        report = await loop.run_in_executor(None, _run_analysis)
        return AnalyzeResponse(
            success=True,
            data=report,
            summary=build_report_summary(report),
            timestamp=_timestamp(),
        )

    @app.exception_handler(ValidationError)
    async def validation_error_handler(_: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": "request validation failed", "details": exc.errors},
        )

    @app.exception_handler(ArchiveError)
    async def archive_error_handler(_: Request, exc: ArchiveError) -> JSONResponse:
        _logger.warning("Rejected archive: %s", exc)
        return JSONResponse(
            status_code=422,
            content={
                "success": False,
                "error": "archive could not be processed",
                "message": "The uploaded file is not a readable, non-empty zip archive.",
            },
        )

    @app.exception_handler(404)
    async def not_found_handler(_: Request, __: Exception) -> JSONResponse:
        return JSONResponse(
            status_code=404,
            content={
                "success": False,
                "error": "endpoint not found",
                "available_endpoints": list(ENDPOINTS.values()),
                "timestamp": _timestamp(),
            },
        )

    @app.exception_handler(Exception)
    async def unexpected_error_handler(_: Request, exc: Exception) -> JSONResponse:
        _logger.error("Analysis failed unexpectedly", exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "internal server error"},
        )

    return app


def run_service(
    host: str = "0.0.0.0", port: int = 3000, config: CodeLocatorConfig | None = None
) -> None:  # pragma: no cover - integration path
    import uvicorn

    app = create_app(config=config)
    uvicorn.run(app, host=host, port=port)


__all__ = ["create_app", "run_service"]
