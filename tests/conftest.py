from __future__ import annotations

import json
from typing import List, Optional

import pytest
import requests
from fastapi.testclient import TestClient

from ghiblify.config import Settings
from ghiblify.editors import BaseImageEditor, EditedImage, EditResult, UpstreamError
from ghiblify.generation import UploadedImage
from ghiblify.main import create_app

MIB = 1024 * 1024
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


class FakeEditor(BaseImageEditor):
    """Records calls and replays a canned EditResult (or raises)."""

    name = "fake"

    def __init__(self, result: Optional[EditResult] = None, exc: Optional[Exception] = None):
        super().__init__()
        self.result = result if result is not None else EditResult(
            images=[EditedImage(url="https://example.com/generated-image.png")]
        )
        self.exc = exc
        self.calls: List[dict] = []

    def is_configured(self) -> bool:
        return True

    def edit_image(self, image_data, filename, content_type, prompt, n=1, size="1024x1024", response_format="url"):
        self.calls.append({
            "image_data": image_data,
            "filename": filename,
            "content_type": content_type,
            "prompt": prompt,
            "n": n,
            "size": size,
            "response_format": response_format,
        })
        if self.exc is not None:
            raise self.exc
        return self.result


def upstream_failure(status_code=None, code=None, type=None, message="upstream said no") -> EditResult:
    return EditResult(error=UpstreamError(status_code=status_code, code=code, type=type, message=message))


def make_upload(
    content: bytes = PNG_BYTES,
    content_type: Optional[str] = "image/png",
    size: Optional[int] = None,
    filename: str = "test.png",
) -> UploadedImage:
    return UploadedImage(
        filename=filename,
        content_type=content_type,
        size=len(content) if size is None else size,
        reader=lambda: content,
    )


def make_response(status_code: int, json_body=None, text: Optional[str] = None, reason: str = "") -> requests.Response:
    """Build a real requests.Response without touching the network."""
    response = requests.Response()
    response.status_code = status_code
    response.reason = reason
    if json_body is not None:
        response._content = json.dumps(json_body).encode()
        response.headers["Content-Type"] = "application/json"
    else:
        response._content = (text or "").encode()
    return response


@pytest.fixture
def settings() -> Settings:
    return Settings(openai_api_key="mock-valid-key")


@pytest.fixture
def editor() -> FakeEditor:
    return FakeEditor()


@pytest.fixture
def factory_calls() -> list:
    return []


@pytest.fixture
def client(settings, editor, factory_calls) -> TestClient:
    def factory(s: Settings) -> BaseImageEditor:
        factory_calls.append(s)
        return editor

    return TestClient(create_app(settings, editor_factory=factory))
