"""Shared fixtures for the extraction test suite."""

import logging
import sys
from pathlib import Path

import httpx
import pytest

# Add project root to Python path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

import processing
import utils
from tests.helpers import JPEG_BYTES, RecordingTransport, make_response_body


@pytest.fixture
def api_key(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    return "sk-test"


@pytest.fixture
def image_paths(tmp_path):
    """Factory writing `count` JPEG files and returning their paths in order."""
    def _make(count, data=JPEG_BYTES):
        paths = []
        for i in range(count):
            path = tmp_path / f"page_{i:03d}.jpg"
            path.write_bytes(data + bytes([i % 256]))
            paths.append(str(path))
        return paths
    return _make


@pytest.fixture
def transport_factory():
    def _make(responder=None):
        if responder is None:
            responder = lambda request: httpx.Response(200, json=make_response_body())
        return RecordingTransport(responder)
    return _make


@pytest.fixture
def root_logger_state():
    """Restores the root logger's handlers and level after a test reconfigures logging."""
    root_logger = logging.getLogger()
    saved_handlers = list(root_logger.handlers)
    saved_level = root_logger.level
    yield root_logger
    for handler in list(root_logger.handlers):
        if handler not in saved_handlers:
            handler.close()
    root_logger.handlers[:] = saved_handlers
    root_logger.setLevel(saved_level)


@pytest.fixture
def counters(monkeypatch):
    """Counts file reads and outgoing requests made during a run."""
    calls = {"reads": 0, "requests": 0}
    real_read = utils.read_image_file

    def counting_read(path):
        calls["reads"] += 1
        return real_read(path)

    def handler(request):
        calls["requests"] += 1
        return httpx.Response(200, json=make_response_body([("stop", "こんにちは\n元気ですか")]))

    real_client = httpx.Client
    monkeypatch.setattr(utils, "read_image_file", counting_read)
    monkeypatch.setattr(processing.httpx, "Client", lambda: real_client(transport=httpx.MockTransport(handler)))
    return calls
