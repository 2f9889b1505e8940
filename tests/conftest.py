import dataclasses
import io

import pytest
import requests
from PIL import Image

from instafilter.config import SETTINGS


@pytest.fixture
def settings(tmp_path):
    return dataclasses.replace(
        SETTINGS,
        library_dir=str(tmp_path / "library"),
        save_format="PNG",
        default_filter="sepia_tone",
        default_intensity=0.5,
        max_image_side=64,
        retries=1,
        timeout=1.0,
        session_ttl=60.0,
        max_sessions=4,
        secret_key="test-secret",
        log_level="WARNING",
    )


@pytest.fixture
def photo():
    img = Image.new("RGB", (40, 30))
    img.putdata([(x * 6, y * 8, 128) for y in range(30) for x in range(40)])
    return img


@pytest.fixture
def png_bytes(photo):
    buffer = io.BytesIO()
    photo.save(buffer, "PNG")
    return buffer.getvalue()


class FakeResponse:
    def __init__(self, content=b"", status_code=200, headers=None):
        self.content = content
        self.status_code = status_code
        self.headers = dict(headers or {})
        self.closed = False

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def iter_content(self, chunk_size=1):
        for start in range(0, len(self.content), chunk_size):
            yield self.content[start:start + chunk_size]

    def close(self):
        self.closed = True


class FakeSession:
    def __init__(self, responses):
        self.headers = {}
        self.calls = []
        self._responses = list(responses)

    def get(self, url, timeout=None, stream=False):
        self.calls.append((url, timeout))
        return self._responses.pop(0)


@pytest.fixture
def fake_session_factory():
    def build(*responses):
        session = FakeSession(responses)
        return session, (lambda: session)

    return build


@pytest.fixture
def response_factory():
    return FakeResponse
