import json
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["SEED_DATABASE"] = "false"
os.environ["EMAIL_ENABLED"] = "false"
os.environ["INTERNAL_API_KEY"] = "internal-test-key"
os.environ["PAYSTACK_SECRET_KEY"] = "sk_test_thrifthub"
os.environ["STORAGE_PUBLIC_URL"] = "https://cdn.thrifthub.test"

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel

from thrifthub import create_app
from thrifthub.cache.cache import cache
from thrifthub.database.connection import engine, get_session
from thrifthub.integration.embeddings import EmbeddingService, get_embedding_service
from thrifthub.integration.paystack import PaystackClient, get_paystack
from thrifthub.storage.R2Service import R2Service, get_storage
from tests.factories import TestDataFactory

PAYSTACK_SECRET = "sk_test_thrifthub"
INTERNAL_HEADERS = {"X-API-Key": "internal-test-key"}

app = create_app()


class PaystackGateway:
    """Canned Paystack API behind an httpx.MockTransport."""

    def __init__(self):
        self.requests = []
        self.verify_data = {"status": "success", "amount": 0, "authorization": {}, "customer": {}}
        self.decline_charges = False

    def handler(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content) if request.content else {}
        self.requests.append((request.url.path, payload))

        if request.url.path == "/transaction/initialize":
            return httpx.Response(200, json={
                "status": True,
                "message": "Authorization URL created",
                "data": {
                    "authorization_url": f"https://checkout.paystack.com/{payload['reference']}",
                    "access_code": "ac_test",
                    "reference": payload["reference"],
                },
            })
        if request.url.path.startswith("/transaction/verify/"):
            reference = request.url.path.rsplit("/", 1)[-1]
            return httpx.Response(200, json={"status": True, "data": {"reference": reference, **self.verify_data}})
        if request.url.path == "/transaction/charge_authorization":
            if self.decline_charges:
                return httpx.Response(400, json={"status": False, "message": "Insufficient funds"})
            return httpx.Response(200, json={
                "status": True,
                "data": {"status": "success", "amount": payload["amount"], "reference": payload["reference"]},
            })
        return httpx.Response(404, json={"status": False, "message": "Not found"})

    def paths(self):
        return [path for path, _ in self.requests]


class EmbeddingApi:
    def __init__(self):
        self.vector = [1.0, 0.0, 0.0]
        self.inputs = []
        self.fail = False

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.inputs.append(json.loads(request.content)["input"])
        if self.fail:
            return httpx.Response(500, json={"error": {"message": "model overloaded"}})
        return httpx.Response(200, json={"data": [{"embedding": self.vector}]})


class FakeS3:
    def __init__(self):
        self.objects = {}
        self.deleted = []

    def put_object(self, Bucket, Key, Body, ContentType):
        self.objects[Key] = (Body, ContentType)

    def delete_object(self, Bucket, Key):
        self.deleted.append(Key)
        self.objects.pop(Key, None)


@pytest.fixture
def session():
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
    cache.clear()
    with Session(engine) as session:
        yield session


@pytest.fixture
def factory(session):
    return TestDataFactory(session)


@pytest.fixture
def gateway():
    return PaystackGateway()


@pytest.fixture
def paystack(gateway):
    return PaystackClient(secret_key=PAYSTACK_SECRET, base_url="https://api.paystack.test", transport=httpx.MockTransport(gateway.handler))


@pytest.fixture
def embedding_api():
    return EmbeddingApi()


@pytest.fixture
def embeddings(embedding_api):
    return EmbeddingService(api_key="test", api_url="https://embeddings.test/v1/embeddings", model="test-model", transport=httpx.MockTransport(embedding_api.handler))


@pytest.fixture
def s3():
    return FakeS3()


@pytest.fixture
def storage(s3):
    return R2Service(client=s3)


@pytest.fixture
def client(session, paystack, embeddings, storage):
    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_paystack] = lambda: paystack
    app.dependency_overrides[get_embedding_service] = lambda: embeddings
    app.dependency_overrides[get_storage] = lambda: storage
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
