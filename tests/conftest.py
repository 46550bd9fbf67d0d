import asyncio
from typing import Any, Dict, List, Optional, Tuple

import pytest
from fastapi.testclient import TestClient
from google.cloud import firestore

from app.core.exceptions import ProviderError
from app.main import create_app
from app.services.identity_service import IdentityGateway


class FakeIdentityProvider:
    """Proveedor en memoria; cada `*_error` hace fallar la operación correspondiente."""

    def __init__(self):
        self.create_error: Optional[Exception] = None
        self.claims_error: Optional[Exception] = None
        self.sign_in_error: Optional[Exception] = None
        self.verify_error: Optional[Exception] = None
        self.lookup_error: Optional[Exception] = None
        self.claims_gate: Optional[asyncio.Event] = None
        self.created: List[Dict[str, Any]] = []
        self.claims: Dict[str, Dict[str, Any]] = {}
        self.verify_calls: List[Tuple[str, bool]] = []

    async def create_user(self, email, password, display_name, email_verified=False, disabled=False):
        if self.create_error:
            raise self.create_error
        record = {
            "uid": f"uid-{len(self.created) + 1}",
            "email": email,
            "emailVerified": email_verified,
            "displayName": display_name,
            "photoURL": None,
            "phoneNumber": None,
            "disabled": disabled,
            "customClaims": None,
            "metadata": {"creationTime": 1700000000000, "lastSignInTime": None},
            "providerData": [],
        }
        self.created.append({"password": password, **record})
        return record

    async def set_custom_user_claims(self, uid, claims):
        if self.claims_gate is not None:
            await self.claims_gate.wait()
        if self.claims_error:
            raise self.claims_error
        self.claims[uid] = claims

    async def sign_in_with_password(self, email, password):
        if self.sign_in_error:
            raise self.sign_in_error
        return {
            "idToken": "id-token-abc",
            "refreshToken": "refresh-xyz",
            "localId": "uid-42",
            "email": email,
        }

    async def get_id_token_result(self, id_token):
        if self.lookup_error:
            raise self.lookup_error
        return {
            "token": id_token,
            "uid": "uid-42",
            "email": "ada@example.com",
            "emailVerified": True,
            "displayName": "Ada",
            "photoURL": "https://example.com/ada.png",
        }

    async def verify_id_token(self, id_token, check_revoked=True):
        self.verify_calls.append((id_token, check_revoked))
        if self.verify_error:
            raise self.verify_error
        return {"uid": "uid-42", "email": "ada@example.com", "regularUser": True}


class FakeSnapshot:
    def __init__(self, doc_id: str, data: Optional[Dict[str, Any]]):
        self.id = doc_id
        self._data = data

    @property
    def exists(self) -> bool:
        return self._data is not None

    def to_dict(self):
        return dict(self._data) if self._data is not None else None


class FakeQuery:
    def __init__(self, docs: Dict[str, Dict[str, Any]]):
        self._docs = docs
        self._order: Optional[Tuple[str, str]] = None
        self._limit: Optional[int] = None

    def order_by(self, field, direction=firestore.Query.ASCENDING):
        self._order = (field, direction)
        return self

    def limit(self, count):
        self._limit = count
        return self

    def stream(self):
        items = list(self._docs.items())
        if self._order:
            field, direction = self._order
            items.sort(key=lambda kv: kv[1].get(field), reverse=direction == firestore.Query.DESCENDING)
        if self._limit is not None:
            items = items[: self._limit]
        for doc_id, data in items:
            yield FakeSnapshot(doc_id, data)


class FakeDocument:
    def __init__(self, docs, doc_id):
        self._docs = docs
        self._id = doc_id

    def get(self):
        return FakeSnapshot(self._id, self._docs.get(self._id))


class FakeCollection(FakeQuery):
    def document(self, doc_id):
        return FakeDocument(self._docs, doc_id)

    def order_by(self, field, direction=firestore.Query.ASCENDING):
        return FakeQuery(self._docs).order_by(field, direction=direction)


class FakeFirestore:
    def __init__(self, collections: Optional[Dict[str, Dict[str, Dict[str, Any]]]] = None):
        self.collections = collections or {}

    def collection(self, name):
        return FakeCollection(self.collections.setdefault(name, {}))


@pytest.fixture()
def provider() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture()
def gateway(provider) -> IdentityGateway:
    return IdentityGateway(provider)


@pytest.fixture()
def firestore_db() -> FakeFirestore:
    return FakeFirestore({
        "posts": {
            "hello-world": {"title": "Hello world", "author": "ada", "createdAt": 1},
            "second-post": {"title": "Second post", "author": "ada", "createdAt": 2},
            "third-post": {"title": "Third post", "author": "grace", "createdAt": 3},
        }
    })


@pytest.fixture()
def client(gateway, firestore_db) -> TestClient:
    return TestClient(create_app(identity_gateway=gateway, firestore_db=firestore_db))
