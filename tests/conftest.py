"""
Shared fixtures: a FakeFormulaService mounted in-process through
httpx.ASGITransport, and a Workbench wired to it.
"""

import httpx
import pytest
import pytest_asyncio

from workbench import RemoteClient, Workbench
from workbench.notifications import NotificationQueue

from fake_service import CIRCLE_AREA, SIMPLE_INTEREST, FakeFormulaService


@pytest.fixture
def service():
    return FakeFormulaService([CIRCLE_AREA, SIMPLE_INTEREST])


@pytest.fixture
def notifications():
    # long dwell: toasts stay put for the duration of a test
    return NotificationQueue(dwell=60, exit_delay=0)


@pytest_asyncio.fixture
async def client(service):
    http = httpx.AsyncClient(transport=httpx.ASGITransport(app=service.app), base_url="http://fake")
    async with http:
        yield RemoteClient("http://fake", http=http)


@pytest_asyncio.fixture
async def workbench(client, notifications):
    wb = Workbench(client=client, notifications=notifications)
    await wb.start()
    return wb
