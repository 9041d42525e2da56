"""Art Director Image Generator - FastAPI Application.

This module is the single entry point for the web application.  It defines
the FastAPI ``app`` instance, all REST API routes, and the ``main()`` CLI
function that launches the uvicorn server.

Architecture
------------
The server is a thin layer between the browser and third-party services:

- **Providers** (OpenAI, Unsplash, Pexels, arbitrary web pages) are reached
  through adapters from :mod:`artdirector.core.provider_adapters`, built
  once in the lifespan and held on ``app.state``.
- **Local logic** (image/style/section extraction, CSV handling, prompt
  composition) lives in :mod:`artdirector.core` and is called directly.
- **Persistence** is file based: generated images under ``outputs_dir``
  (served at ``/generated-images``) and a capped ``history.json``.

Every success response carries ``success: true``.  Every failure is
``{"error": message}`` with 400 (validation), 404, 405, 409, 500, or the
status an upstream provider answered with.

Endpoints
---------
==========  ==================================  ==============================
Method      Path                                Purpose
==========  ==================================  ==============================
GET         ``/api/check-config``               Which provider keys are set
POST        ``/api/generate-image``             Generate one image
POST        ``/api/save-image``                 Download and persist an image
POST        ``/api/analyze-page``               Image suggestions per section
POST        ``/api/analyze-website-style``      Style of a website
POST        ``/api/scan-page-content``          Page HTML and its sections
POST        ``/api/extract-page-images``        Images used on a page
POST        ``/api/search-library-images``      Unsplash / Pexels search
POST        ``/api/analyze-library-style``      Style of stock photos
POST        ``/api/analyze-and-modify-image``   Describe and regenerate
GET         ``/api/styles``                     Preset styles and templates
POST        ``/api/prompt/generate``            Compose a prompt
POST        ``/api/csv/parse``                  Parse a batch CSV
POST        ``/api/csv/analyze``                Subjects for CSV tasks
POST        ``/api/csv/generate``               Images for CSV tasks
POST        ``/api/csv/export``                 CSV with appended results
GET         ``/api/history``                    Paginated history
GET         ``/api/history/{id}``               One history entry
DELETE      ``/api/history``                    Clear the history
DELETE      ``/api/history/{id}``               Delete one history entry
==========  ==================================  ==============================

Usage
-----
CLI (installed entry point)::

    artdirector

Direct invocation::

    python -m artdirector.api.main
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from artdirector import __version__
from artdirector.api.models import (
    AnalyzePageRequest,
    CSVAnalyzeRequest,
    CSVExportRequest,
    CSVGenerateRequest,
    CSVParseRequest,
    GenerateImageRequest,
    LibrarySearchRequest,
    LibraryStyleRequest,
    ModifyImageRequest,
    PageUrlRequest,
    PromptRequest,
    SaveImageRequest,
)
from artdirector.core import adapters  # noqa: F401  (registers the provider adapters)
from artdirector.core.analysis import (
    analyze_library_style,
    analyze_website_style,
    build_modification_prompt,
    describe_image,
    suggest_section_images,
)
from artdirector.core.batch import CSVBatchRunner
from artdirector.core.config import ArtDirectorConfig, config
from artdirector.core.csv_parser import CSVParser, CSVTask, TaskStatus
from artdirector.core.errors import ArtDirectorError
from artdirector.core.history_store import HistoryStore, paginate_history
from artdirector.core.image_extractor import extract_images
from artdirector.core.image_store import ImageStore
from artdirector.core.models import HistoryEntry
from artdirector.core.prompt_generator import PromptGenerator, enrich_prompt
from artdirector.core.provider_adapters import provider_registry
from artdirector.core.section_extractor import SectionExtractor
from artdirector.core.style_extractor import extract_style_candidates
from artdirector.core.style_presets import StylePresets

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Application state.
# ---------------------------------------------------------------------------


def init_state(
    app: FastAPI, settings: ArtDirectorConfig, client: httpx.AsyncClient | None = None
) -> None:
    """Build every collaborator the routes use and store it on ``app.state``.

    Args:
        app: The FastAPI application instance.
        settings: Configuration to build from.
        client: Shared HTTP client for all provider adapters.
    """
    app.state.config = settings
    app.state.openai = provider_registry.instantiate("openai", settings, client)
    app.state.libraries = {
        name: provider_registry.instantiate(name, settings, client)
        for name in provider_registry.list_by_type("library")
    }
    app.state.web = provider_registry.instantiate("web", settings, client)
    app.state.presets = StylePresets.from_file(settings.data_dir / "styles.json")
    app.state.generator = PromptGenerator(app.state.presets)
    app.state.history = HistoryStore(settings.history_file, settings.history_limit)
    app.state.image_store = ImageStore(settings.outputs_dir)
    app.state.sleep = None


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the shared HTTP client and build the application state.

    On shutdown the HTTP client is closed.
    """
    # --- Startup -----------------------------------------------------------
    client = httpx.AsyncClient(timeout=config.request_timeout, follow_redirects=True)
    init_state(app, config, client)
    logger.info(
        f"Art Director ready (presets: {', '.join(app.state.presets.ids()) or 'none'}; "
        f"OpenAI configured: {config.is_configured('openai')})"
    )

    yield  # Application runs here.

    # --- Shutdown ----------------------------------------------------------
    await client.aclose()
    logger.info("HTTP client closed on shutdown.")


# ---------------------------------------------------------------------------
# FastAPI application instance.
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Art Director Image Generator",
    description="Style-consistent AI image generation with page, style and CSV analysis.",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Saved images are served from the outputs tree.
app.mount(
    "/generated-images",
    StaticFiles(directory=str(config.outputs_dir), check_dir=False),
    name="generated-images",
)


# ---------------------------------------------------------------------------
# Error responses.
# ---------------------------------------------------------------------------


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    messages = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{field}: {error.get('msg')}" if field else str(error.get("msg")))
    return JSONResponse(status_code=400, content={"error": "; ".join(messages) or "Invalid request"})


@app.exception_handler(ArtDirectorError)
async def art_director_error_handler(request: Request, exc: ArtDirectorError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _record_history(**fields) -> HistoryEntry:
    return app.state.history.add(HistoryEntry(**fields))


def _batch_runner() -> CSVBatchRunner:
    settings: ArtDirectorConfig = app.state.config
    kwargs = {}
    if app.state.sleep is not None:
        kwargs["sleep"] = app.state.sleep
    return CSVBatchRunner(
        app.state.openai,
        app.state.generator,
        analysis_delay=settings.analysis_delay,
        generation_delay=settings.generation_delay,
        **kwargs,
    )


# ---------------------------------------------------------------------------
# Configuration and generation.
# ---------------------------------------------------------------------------


@app.get("/api/check-config")
async def check_config() -> dict:
    """Report which provider keys are configured, never their values."""
    settings: ArtDirectorConfig = app.state.config
    configured = {
        "openai": settings.is_configured("openai"),
        "unsplash": settings.is_configured("unsplash"),
        "pexels": settings.is_configured("pexels"),
    }
    return {
        "success": True,
        "configured": configured,
        "message": "API keys configured on the server"
        if configured["openai"]
        else "Configuration required",
    }


@app.post("/api/generate-image")
async def generate_image(req: GenerateImageRequest) -> dict:
    """Forward a prompt to the image provider and record the result.

    Returns:
        ``success``, ``imageUrl``, ``revisedPrompt`` and the id of the new
        history entry.
    """
    settings: ArtDirectorConfig = app.state.config
    model = req.model or settings.image_model
    result = await app.state.openai.generate_image(
        req.prompt, model=model, size=req.size, quality=req.quality
    )
    entry = _record_history(
        image_url=result["url"],
        prompt=req.prompt,
        style=req.style,
        subject=req.subject,
        model=model,
        size=req.size,
    )
    return {
        "success": True,
        "imageUrl": result["url"],
        "revisedPrompt": result["revised_prompt"],
        "historyId": entry.id,
    }


@app.post("/api/save-image")
async def save_image(req: SaveImageRequest) -> dict:
    """Download an image and store it with its metadata sidecar."""
    image_bytes = await app.state.web.download(req.image_url)
    saved = app.state.image_store.save(image_bytes, req.image_url, req.metadata)
    return {"success": True, **saved.to_api()}


# ---------------------------------------------------------------------------
# Page and style analysis.
# ---------------------------------------------------------------------------


@app.post("/api/analyze-page")
async def analyze_page(req: AnalyzePageRequest) -> dict:
    """Ask the vision model which page sections deserve an image."""
    style_name = app.state.presets.style_name(req.style_version)
    suggestions, used_fallback = await suggest_section_images(
        app.state.openai, req.sections, style_name
    )
    return {"success": True, "suggestions": suggestions, "fallback": used_fallback}


@app.post("/api/analyze-website-style")
async def analyze_website(req: PageUrlRequest) -> dict:
    """Fetch a page, extract colour and font candidates and describe its style.

    The ``style`` object carries the raw candidates (``allColors``,
    ``allFonts``) alongside the descriptor fields.
    """
    html = await app.state.web.fetch_html(req.url)
    candidates = extract_style_candidates(html)
    descriptor, used_fallback = await analyze_website_style(app.state.openai, req.url, candidates)
    return {
        "success": True,
        "url": req.url,
        "style": {
            "allColors": candidates.colors,
            "allFonts": candidates.fonts,
            **descriptor.to_api(),
        },
        "fallback": used_fallback,
    }


@app.post("/api/scan-page-content")
async def scan_page_content(req: PageUrlRequest) -> dict:
    """Fetch a page and extract its content sections."""
    html = await app.state.web.fetch_html(req.url)
    sections = SectionExtractor().extract_from_html(html)
    logger.info(f"Scanned {req.url}: {len(sections)} section(s)")
    return {
        "success": True,
        "url": req.url,
        "html": html,
        "sections": [section.to_api() for section in sections],
    }


@app.post("/api/extract-page-images")
async def extract_page_images(req: PageUrlRequest) -> dict:
    """Fetch a page and list the images it uses."""
    settings: ArtDirectorConfig = app.state.config
    html = await app.state.web.fetch_html(req.url)
    images = extract_images(html, req.url, min_size=settings.min_image_size)
    logger.info(f"Found {len(images)} image(s) on {req.url}")
    return {
        "success": True,
        "url": req.url,
        "images": [image.to_dict() for image in images],
        "count": len(images),
    }


@app.post("/api/search-library-images", response_model=None)
async def search_library_images(req: LibrarySearchRequest) -> dict | JSONResponse:
    """Search Unsplash or Pexels and return normalised photos."""
    library = app.state.libraries.get(req.library)
    if library is None:
        names = " or ".join(f'"{name}"' for name in app.state.libraries)
        return _error(400, f"Invalid library. Use {names}")

    results = await library.search(req.query)
    return {
        "success": True,
        "library": req.library,
        "query": req.query,
        "results": results,
        "total": len(results),
    }


@app.post("/api/analyze-library-style")
async def analyze_library(req: LibraryStyleRequest) -> dict:
    """Describe the shared style of selected stock photos."""
    descriptor, used_fallback = await analyze_library_style(app.state.openai, req.image_urls)
    return {
        "success": True,
        "imagesAnalyzed": len(req.image_urls),
        "style": descriptor.to_api(),
        "fallback": used_fallback,
    }


@app.post("/api/analyze-and-modify-image")
async def analyze_and_modify_image(req: ModifyImageRequest) -> dict:
    """Describe an image, apply a modification and generate the new version."""
    settings: ArtDirectorConfig = app.state.config
    description = await describe_image(app.state.openai, req.image_url)
    prompt = build_modification_prompt(description, req.modification_prompt, req.style)

    model = req.model or settings.image_model
    result = await app.state.openai.generate_image(
        prompt, model=model, size=req.size, quality=req.quality
    )
    entry = _record_history(
        image_url=result["url"],
        prompt=prompt,
        style="modified",
        subject=req.modification_prompt,
        model=model,
        size=req.size,
    )
    return {
        "success": True,
        "originalImageUrl": req.image_url,
        "newImageUrl": result["url"],
        "imageDescription": description,
        "generationPrompt": prompt,
        "revisedPrompt": result["revised_prompt"],
        "historyId": entry.id,
    }


# ---------------------------------------------------------------------------
# Styles and prompts.
# ---------------------------------------------------------------------------


@app.get("/api/styles")
async def list_styles() -> dict:
    return {"success": True, "styles": app.state.presets.list_styles()}


@app.post("/api/prompt/generate")
async def generate_prompt(req: PromptRequest) -> dict:
    """Compose the prompt for a style and subject, optionally AI-enriched."""
    prompt = app.state.generator.generate_prompt(
        req.style_id, req.subject, template_id=req.template_id, custom_style=req.custom_style
    )
    enriched = False
    if req.enrich:
        prompt, enriched = await enrich_prompt(prompt, app.state.openai)
    return {"success": True, "prompt": prompt, "enriched": enriched}


# ---------------------------------------------------------------------------
# CSV batch workflow.
# ---------------------------------------------------------------------------


def _task_summary(tasks: list[CSVTask]) -> dict[str, int]:
    return {status.value: sum(1 for t in tasks if t.status is status) for status in TaskStatus}


@app.post("/api/csv/parse")
async def parse_csv(req: CSVParseRequest) -> dict:
    """Parse a batch CSV and build its pending tasks."""
    parser = CSVParser()
    parsed = parser.parse(req.csv_text)
    tasks = parser.build_tasks()
    return {"success": True, **parsed.to_dict(), "tasks": [task.to_dict() for task in tasks]}


@app.post("/api/csv/analyze")
async def analyze_csv(req: CSVAnalyzeRequest) -> dict:
    """Extract a subject for every pending task, one call at a time."""
    tasks = [model.to_task() for model in req.tasks]
    await _batch_runner().analyze_all(tasks)
    return {
        "success": True,
        "tasks": [task.to_dict() for task in tasks],
        "summary": _task_summary(tasks),
    }


@app.post("/api/csv/generate")
async def generate_csv(req: CSVGenerateRequest) -> dict:
    """Generate one image per ready task, one call at a time.

    Each generated image is added to the history; with ``save`` it is also
    downloaded into the outputs tree.
    """
    settings: ArtDirectorConfig = app.state.config
    model = req.model or settings.image_model
    saved_paths: list[str] = []

    async def on_generated(task: CSVTask) -> None:
        _record_history(
            image_url=task.image_url,
            prompt=task.prompt,
            style=req.style_id,
            subject=task.subject,
            model=model,
            size=req.size,
        )
        if req.save:
            image_bytes = await app.state.web.download(task.image_url)
            result = app.state.image_store.save(
                image_bytes,
                task.image_url,
                {
                    "style": req.style_id,
                    "subject": task.subject,
                    "prompt": task.prompt,
                    "model": model,
                    "size": req.size,
                    "quality": req.quality,
                    "mode": "csv",
                    "column": task.image_column,
                    "rowIndex": task.row_index,
                },
            )
            saved_paths.append(result.path)

    tasks = [task_model.to_task() for task_model in req.tasks]
    await _batch_runner().generate_all(
        tasks,
        req.style_id,
        custom_style=req.custom_style,
        template_id=req.template_id,
        model=model,
        size=req.size,
        quality=req.quality,
        on_generated=on_generated,
    )
    return {
        "success": True,
        "tasks": [task.to_dict() for task in tasks],
        "summary": _task_summary(tasks),
        "savedPaths": saved_paths,
    }


@app.post("/api/csv/export")
async def export_csv(req: CSVExportRequest) -> dict:
    """Rebuild the CSV with ``<col>_url`` and ``<col>_prompt`` columns."""
    parser = CSVParser()
    parser.parse(req.csv_text)
    content = parser.export_results([model.to_task() for model in req.tasks])
    return {"success": True, "csv": content, "filename": "art-director-results.csv"}


# ---------------------------------------------------------------------------
# History.
# ---------------------------------------------------------------------------


@app.get("/api/history")
async def get_history(
    page: int = Query(default=1, ge=1),
    per_page: int = Query(default=20, ge=1, le=100),
) -> dict:
    """Return the history, newest first, one page at a time."""
    return {"success": True, **paginate_history(app.state.history.entries(), page, per_page)}


@app.get("/api/history/{entry_id}", response_model=None)
async def get_history_entry(entry_id: str) -> dict | JSONResponse:
    entry = next((e for e in app.state.history.entries() if e.id == entry_id), None)
    if entry is None:
        return _error(404, "History entry not found")
    return {"success": True, "entry": entry.to_api()}


@app.delete("/api/history")
async def clear_history() -> dict:
    return {"success": True, "deleted": app.state.history.clear()}


@app.delete("/api/history/{entry_id}", response_model=None)
async def delete_history_entry(entry_id: str) -> dict | JSONResponse:
    if not app.state.history.delete(entry_id):
        return _error(404, "History entry not found")
    return {"success": True, "deleted": entry_id}


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Reads host, port and log level from :data:`~artdirector.core.config.config`
    (``ARTDIRECTOR_SERVER_HOST``, ``ARTDIRECTOR_SERVER_PORT``,
    ``ARTDIRECTOR_LOG_LEVEL``).  Defaults to ``0.0.0.0:3000``.

    This function is registered as the ``artdirector`` console script in
    ``pyproject.toml``.
    """
    import uvicorn

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "artdirector.api.main:app",
        host=config.server_host,
        port=config.server_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
