"""Shared pytest fixtures for Art Director tests."""

import io
import shutil
import tempfile
from pathlib import Path
from typing import Any, Generator

import pytest
from PIL import Image

from artdirector.core.config import ArtDirectorConfig
from artdirector.core.errors import ProviderError
from artdirector.core.style_presets import StylePresets

DATA_DIR = Path(__file__).resolve().parent.parent / "src" / "artdirector" / "data"


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Directory is removed after test completes
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path) -> ArtDirectorConfig:
    """Create a test configuration with temporary directories and fake keys.

    Pexels is deliberately left unconfigured.
    """
    return ArtDirectorConfig(
        openai_api_key="sk-test",
        unsplash_access_key="unsplash-test",
        pexels_api_key=None,
        openai_base_url="https://api.openai.test/v1",
        unsplash_base_url="https://api.unsplash.test",
        pexels_base_url="https://api.pexels.test/v1",
        outputs_dir=temp_dir / "outputs",
        history_file=temp_dir / "state" / "history.json",
        data_dir=DATA_DIR,
        analysis_delay=0,
        generation_delay=0,
    )


@pytest.fixture
def presets() -> StylePresets:
    return StylePresets.from_file(DATA_DIR / "styles.json")


@pytest.fixture
def png_bytes() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (8, 8), (255, 0, 0)).save(buffer, format="PNG")
    return buffer.getvalue()


class FakeOpenAI:
    """Stand-in for OpenAIAdapter that records calls.

    ``chat_answers`` and ``vision_answers`` are consumed in order; when
    empty, ``default_answer`` is returned.  Any answer that is an exception
    instance is raised instead.
    """

    def __init__(self, config: ArtDirectorConfig) -> None:
        self.config = config
        self.chat_answers: list[Any] = []
        self.vision_answers: list[Any] = []
        self.default_answer = "A default subject"
        self.image_error: Exception | None = None
        self.chat_calls: list[dict] = []
        self.vision_calls: list[dict] = []
        self.image_calls: list[dict] = []

    def _next(self, queue: list[Any]) -> str:
        answer = queue.pop(0) if queue else self.default_answer
        if isinstance(answer, Exception):
            raise answer
        return answer

    async def chat(self, messages, model=None, temperature=None, max_tokens=None, response_format=None):
        self.chat_calls.append(
            {
                "messages": messages,
                "model": model,
                "temperature": temperature,
                "max_tokens": max_tokens,
                "response_format": response_format,
            }
        )
        return self._next(self.chat_answers)

    async def vision(self, prompt, image_urls, model=None, max_tokens=500, detail=None):
        self.vision_calls.append({"prompt": prompt, "image_urls": image_urls, "detail": detail})
        return self._next(self.vision_answers)

    async def generate_image(self, prompt, model=None, size="1024x1024", quality="standard"):
        self.image_calls.append({"prompt": prompt, "model": model, "size": size, "quality": quality})
        if self.image_error is not None:
            raise self.image_error
        number = len(self.image_calls)
        return {"url": f"https://images.test/generated-{number}.png", "revised_prompt": f"revised {number}"}


class FakeWeb:
    """Stand-in for WebPageFetcher serving canned pages and image bytes."""

    def __init__(self, pages: dict[str, str] | None = None, image: bytes = b"") -> None:
        self.pages = pages or {}
        self.image = image
        self.downloads: list[str] = []

    async def fetch_html(self, url: str) -> str:
        if url not in self.pages:
            raise ProviderError("Could not fetch the content of this page", status_code=500, provider="Web")
        return self.pages[url]

    async def download(self, url: str) -> bytes:
        self.downloads.append(url)
        return self.image


class FakeLibrary:
    def __init__(self, results: list[dict] | None = None) -> None:
        self.results = results or []
        self.queries: list[str] = []

    async def search(self, query: str) -> list[dict]:
        self.queries.append(query)
        return self.results


@pytest.fixture
def fake_openai(test_config: ArtDirectorConfig) -> FakeOpenAI:
    return FakeOpenAI(test_config)


@pytest.fixture
def fake_web(png_bytes: bytes) -> FakeWeb:
    return FakeWeb(image=png_bytes)


@pytest.fixture
def test_client(test_config, fake_openai, fake_web):
    """FastAPI TestClient with every provider replaced by a fake.

    The lifespan runs normally, then the state is rebuilt from
    ``test_config`` and the adapters are swapped for fakes.
    """
    from fastapi.testclient import TestClient

    from artdirector.api.main import app, init_state

    with TestClient(app) as client:
        init_state(app, test_config)
        app.state.openai = fake_openai
        app.state.web = fake_web
        app.state.libraries = {
            "unsplash": FakeLibrary(
                [
                    {
                        "id": "abc",
                        "url": "https://images.unsplash.test/abc",
                        "thumb": "https://images.unsplash.test/abc-small",
                        "author": "Ada",
                        "authorUrl": "https://unsplash.test/@ada",
                        "downloadUrl": "https://api.unsplash.test/photos/abc/download",
                        "description": "A lake",
                        "colors": ["#334455"],
                    }
                ]
            ),
            "pexels": FakeLibrary(),
        }
        yield client
