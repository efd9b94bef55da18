import json

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from app.main import create_app
from app.storage.service import Storage
from app.whatsapp.service import WhatsAppConfig, WhatsAppService


def make_storage() -> Storage:
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    storage = Storage(engine)
    storage.create_schema()
    return storage


class FakeGraph:
    """Records Graph API calls and answers with canned responses."""

    def __init__(self):
        self.requests = []
        self.status_code = 200
        self.payload = {"messaging_product": "whatsapp", "messages": [{"id": "wamid.TEST1"}]}

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        self.requests.append({"method": request.method, "url": str(request.url), "body": body, "headers": request.headers})
        return httpx.Response(self.status_code, json=self.payload)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


TEST_CONFIG = WhatsAppConfig(access_token="token-1", phone_number_id="1234567890", verify_token="verify-me")


@pytest.fixture()
def storage():
    return make_storage()


@pytest.fixture()
def graph():
    return FakeGraph()


@pytest.fixture()
def whatsapp(storage, graph):
    return WhatsAppService(storage, transport=graph.transport)


@pytest.fixture()
def client(storage, whatsapp):
    app = create_app(storage=storage, whatsapp=whatsapp)
    return TestClient(app)
