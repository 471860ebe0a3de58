"""Shared fixtures: scripted inference, fake page extraction and a fake Firestore."""

from typing import List

import pytest
from fastapi.testclient import TestClient

from rentalguard.extract import PageText
from rentalguard.inference import InferenceSuccess
from rentalguard.main import app, get_db_getter, get_orchestrator, get_token_verifier
from rentalguard.verify import VerifyOrchestrator


class ScriptedInvoker:
    """Stands in for InferenceInvoker; returns a fixed outcome and records calls."""

    def __init__(self, outcome=None):
        self.outcome = outcome if outcome is not None else InferenceSuccess("{}")
        self.calls: List[list] = []

    def invoke(self, blocks):
        self.calls.append(list(blocks))
        return self.outcome


class FakeExtractor:
    def __init__(self, page: PageText = None):
        self.page = page if page is not None else PageText("")
        self.urls: List[str] = []

    def __call__(self, url):
        self.urls.append(url)
        return self.page


class FakeDocRef:
    def __init__(self, doc_id):
        self.id = doc_id


class FakeSnapshot:
    def __init__(self, doc_id, data):
        self.id = doc_id
        self._data = data

    def to_dict(self):
        return dict(self._data)


class FakeQuery:
    def __init__(self, docs):
        self.docs = docs

    def where(self, field, op, value):
        assert op == "=="
        return FakeQuery([d for d in self.docs if d[1].get(field) == value])

    def order_by(self, field, direction=None):
        reverse = str(direction).upper().endswith("DESCENDING")
        return FakeQuery(sorted(self.docs, key=lambda d: d[1][field], reverse=reverse))

    def limit(self, n):
        return FakeQuery(self.docs[:n])

    def stream(self):
        return iter(FakeSnapshot(i, d) for i, d in self.docs)


class FakeCollection(FakeQuery):
    def add(self, data):
        doc_id = f"doc{len(self.docs) + 1}"
        self.docs.append((doc_id, dict(data)))
        return None, FakeDocRef(doc_id)


class FakeDB:
    def __init__(self):
        self.collections = {}

    def collection(self, name):
        return self.collections.setdefault(name, FakeCollection([]))


@pytest.fixture
def invoker():
    return ScriptedInvoker()


@pytest.fixture
def extractor():
    return FakeExtractor()


@pytest.fixture
def fake_db():
    return FakeDB()


@pytest.fixture
def client(invoker, extractor, fake_db):
    def verify_user(token):
        if token == "good-token":
            return "user-1"
        raise ValueError("invalid token")

    app.dependency_overrides[get_orchestrator] = lambda: VerifyOrchestrator(invoker, extract=extractor)
    app.dependency_overrides[get_db_getter] = lambda: (lambda: fake_db)
    app.dependency_overrides[get_token_verifier] = lambda: verify_user
    yield TestClient(app)
    app.dependency_overrides.clear()
