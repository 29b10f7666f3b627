"""
Pytest configuration and fixtures for Forge UI backend tests.
"""

from __future__ import annotations

import os

# Set test environment variables before importing config
os.environ["TESTING"] = "true"

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402

from backend.main import app  # noqa: E402
from backend.routes.apply import get_apply_service  # noqa: E402
from backend.services.apply_service import ApplyService  # noqa: E402
from backend.services.preview_channel import preview_channel  # noqa: E402

HOME_PAGE = """'use client';
import { useState } from 'react';

export default function Home() {
  const [open, setOpen] = useState(false);
  return (
    <main className="p-8">
      {/* You can add your main content here */}
    </main>
  );
}
"""


@pytest.fixture
def project(tmp_path):
    """A minimal Next.js-style project with a home page."""
    (tmp_path / "app").mkdir()
    (tmp_path / "app" / "page.tsx").write_text(HOME_PAGE, encoding="utf-8")
    return tmp_path


@pytest.fixture
def apply_service(project):
    """ApplyService bound to the temp project, injected into the app."""
    service = ApplyService(project)
    app.dependency_overrides[get_apply_service] = lambda: service
    yield service
    app.dependency_overrides.pop(get_apply_service, None)


@pytest.fixture(autouse=True)
def reset_preview_channel():
    """Each test starts with nothing published."""
    preview_channel.latest = None
    yield
    preview_channel.latest = None


@pytest_asyncio.fixture
async def async_client():
    """Async HTTP client against the ASGI app."""
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
