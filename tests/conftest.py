"""Shared pytest fixtures for Image Relay tests."""

import shutil
import tempfile
from pathlib import Path
from typing import Callable, Generator

import httpx
import pytest
from fastapi.testclient import TestClient

from imagerelay.api.main import create_app
from imagerelay.core.config import RelayConfig
from imagerelay.core.log_store import LogStore

# Minimal PNG signature plus a tag byte so each fake image hashes differently.
PNG_HEADER = b"\x89PNG\r\n\x1a\n"


class FakeUpstream:
    """Stand-in for the inference API, served through ``httpx.MockTransport``.

    Every request is recorded.  Queued responses are returned first (queued
    exceptions are raised instead); once the queue is empty each call returns
    a distinct fake PNG.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.queued: list[httpx.Response | Exception] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.queued:
            queued = self.queued.pop(0)
            if isinstance(queued, Exception):
                raise queued
            return queued
        return httpx.Response(
            200,
            content=PNG_HEADER + bytes([len(self.requests)]),
            headers={"content-type": "image/png"},
        )

    def queue(self, *responses: httpx.Response | Exception) -> None:
        self.queued.extend(responses)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


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
def log_path(temp_dir: Path) -> Path:
    """Location of the audit log file (not created until first append)."""
    return temp_dir / "data" / "generation_log.json"


@pytest.fixture
def test_config(log_path: Path) -> RelayConfig:
    """Create a test configuration with credentials and a temporary log file.

    Args:
        log_path: Audit log location from fixture

    Returns:
        RelayConfig instance for testing
    """
    return RelayConfig(
        _env_file=None,
        model_id="test-org/test-model",
        hf_token="test-token",
        admin_password="s3cret",
        inference_base_url="https://inference.test/models",
        images_per_request=3,
        log_file=log_path,
    )


@pytest.fixture
def log_store(log_path: Path) -> LogStore:
    """LogStore backed by the temporary log file."""
    return LogStore(log_path)


@pytest.fixture
def fake_upstream() -> FakeUpstream:
    """Fresh stub of the inference API."""
    return FakeUpstream()


@pytest.fixture
def make_client(
    test_config: RelayConfig, fake_upstream: FakeUpstream
) -> Generator[Callable[..., TestClient], None, None]:
    """Factory for TestClients built from ``test_config`` with overrides.

    Usage::

        client = make_client(admin_password=None)

    All clients are closed (and the app lifespan shut down) after the test.
    """
    clients: list[TestClient] = []

    def _make(**overrides) -> TestClient:
        config = test_config.model_copy(update=overrides) if overrides else test_config
        client = TestClient(create_app(config, transport=fake_upstream.transport))
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def test_client(make_client) -> TestClient:
    """TestClient for the default test configuration."""
    return make_client()
