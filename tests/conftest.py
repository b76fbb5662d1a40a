"""
Shared test configuration and fixtures for transmute tests.
"""

import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import List

import pytest
from fastapi.testclient import TestClient

from app import app
from transmute.pipeline import ConversionPipeline
from transmute.utils.codec_runtime import CodecRuntime, CodecSettings
from transmute.utils.output_store import OutputStore

from samples import make_image, sample_for


# ===== STANDARD FIXTURES =====

@pytest.fixture(scope="session")
def client(tmp_path_factory):
    """FastAPI test client with the lifespan running and outputs in a temp directory."""
    with TestClient(app) as test_client:
        app.state.output_store = OutputStore(tmp_path_factory.mktemp("outputs"))
        yield test_client


@pytest.fixture
def output_dir(client) -> Path:
    """Directory the test client's converted files are written to."""
    return app.state.output_store.base_dir


@pytest.fixture
def codec_runtime():
    """A started codec runtime with two workers."""
    runtime = CodecRuntime(CodecSettings(concurrency=2, pdf_render_dpi=72))
    runtime.startup()
    yield runtime
    runtime.shutdown()


@pytest.fixture
def pipeline(codec_runtime) -> ConversionPipeline:
    return ConversionPipeline(codec_runtime)


@pytest.fixture
def recording_http_server():
    """Local HTTP server that records every path requested from it."""
    hits: List[str] = []

    class RecordingHandler(BaseHTTPRequestHandler):
        def do_GET(self):
            hits.append(self.path)
            self.send_response(200)
            self.send_header("Content-Type", "image/png")
            self.end_headers()
            self.wfile.write(make_image("png"))

        def log_message(self, format, *args):
            pass

    server = ThreadingHTTPServer(("127.0.0.1", 0), RecordingHandler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield f"http://127.0.0.1:{server.server_address[1]}", hits
    finally:
        server.shutdown()
        server.server_close()


@pytest.fixture
def sample_file_by_subtype():
    """Factory fixture for getting sample bytes by subtype."""
    return sample_for
