"""FastAPI application entrypoint for javadep service mode."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable, List, Optional

try:  # pragma: no cover - optional dependency
    from fastapi import FastAPI
    from fastapi.responses import JSONResponse
    from pydantic import BaseModel

    _FASTAPI_AVAILABLE = True
except ModuleNotFoundError:  # pragma: no cover - service mode optional
    FastAPI = None  # type: ignore[assignment]
    JSONResponse = None  # type: ignore[assignment]
    BaseModel = object  # type: ignore[assignment]
    _FASTAPI_AVAILABLE = False

from ..classpath import ClasspathError, list_jars
from ..models import ScanPolicy, TraversalResult
from ..traversal import analyze

Analyzer = Callable[..., TraversalResult]


class AnalyzeRequest(BaseModel):
    classes: List[str]
    classpath: List[str] = []
    roots: List[str] = []
    system_path: List[str] = []
    java_home: Optional[str] = None
    declarations: bool = True
    code: bool = True
    system: bool = False


class AnalyzeResponse(BaseModel):
    classes: List[str]
    archives: List[str]
    unresolved: List[str]
    failed: List[str]


class HealthResponse(BaseModel):
    status: str


def create_app(analyzer: Analyzer = analyze) -> FastAPI:
    """Create the FastAPI application exposing dependency analysis."""

    if not _FASTAPI_AVAILABLE:  # pragma: no cover - validated via unit tests
        raise RuntimeError(
            "FastAPI is required for service mode. Install it with `pip install fastapi uvicorn`."
        )

    app = FastAPI(title="javadep Service", version="1.0.0")

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/analyze", response_model=AnalyzeResponse)
    async def analyze_classes(payload: AnalyzeRequest) -> AnalyzeResponse:
        def _run() -> TraversalResult:
            classpath: List[Path] = []
            for root in payload.roots:
                classpath.extend(list_jars(Path(root)))
            classpath.extend(Path(element) for element in payload.classpath)
            return analyzer(
                payload.classes,
                classpath,
                system_path=[Path(element) for element in payload.system_path],
                java_home=Path(payload.java_home) if payload.java_home else None,
                policy=ScanPolicy(
                    declarations=payload.declarations,
                    code=payload.code,
                    system=payload.system,
                ),
            )

        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(None, _run)
        return AnalyzeResponse(
            classes=sorted(result.classes),
            archives=sorted(result.archives),
            unresolved=sorted(result.unresolved),
            failed=sorted(result.failed),
        )

    @app.exception_handler(ClasspathError)
    async def classpath_error_handler(
        _: Any, exc: ClasspathError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(
    host: str = "127.0.0.1", port: int = 8000
) -> None:  # pragma: no cover - integration path
    if not _FASTAPI_AVAILABLE:
        raise RuntimeError(
            "FastAPI is required for service mode. Install it with `pip install fastapi uvicorn`."
        )

    try:
        import uvicorn
    except ModuleNotFoundError as exc:  # pragma: no cover - optional dependency
        raise RuntimeError(
            "uvicorn is required to run the service. Install it with `pip install uvicorn`."
        ) from exc

    app = create_app()
    uvicorn.run(app, host=host, port=port)
