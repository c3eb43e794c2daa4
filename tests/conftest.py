"""
Shared fixtures: one Flask app on in-memory SQLite, tables rebuilt per test.
"""

import pytest

from flowbot.app import create_app
from flowbot.config.database import db as _db
from flowbot.flows.services.graph import FlowGraph
from flowbot.flows.services.sandbox_service import SandboxResult
from flowbot.models import ChatBot


@pytest.fixture(scope="session")
def app():
    return create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite://",
    })


@pytest.fixture
def db(app):
    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app, db):
    return app.test_client()


@pytest.fixture
def make_bot(db):
    def _make_bot(flow, name="Test Bot"):
        bot = ChatBot(name=name, conversation_flow=flow)
        db.session.add(bot)
        db.session.commit()
        return bot

    return _make_bot


def make_graph(nodes, edges=()):
    return FlowGraph.from_dict({"nodes": list(nodes), "edges": list(edges)})


class StubSandbox:
    """Stands in for CodeSandboxService; records calls, returns a fixed result."""

    def __init__(self, result=None):
        self.result = result or SandboxResult(success=True, result=None)
        self.calls = []

    def execute(self, node, variables):
        self.calls.append((node.id, dict(variables)))
        return self.result


# Flows shared by the API tests

GREETING_FLOW = {
    "nodes": [
        {"id": "1", "type": "question", "data": {"message": "What is your name?", "variable": "name"}},
        {"id": "2", "type": "message", "data": {"message": "Hi {name}"}},
    ],
    "edges": [{"source": "1", "target": "2"}],
}

BRANCH_FLOW = {
    "nodes": [
        {"id": "1", "type": "message", "data": {"message": "Welcome"}},
        {"id": "2", "type": "branch", "data": {"message": "Continue?", "options": ["Yes", "No"]}},
        {"id": "3", "type": "branchOption", "data": {"label": "Yes"}},
        {"id": "4", "type": "branchOption", "data": {"label": "No"}},
        {"id": "5", "type": "message", "data": {"message": "Great"}},
        {"id": "6", "type": "redirect", "data": {"redirectUrl": "https://example.com/bye"}},
    ],
    "edges": [
        {"source": "1", "target": "2"},
        {"source": "2", "target": "3"},
        {"source": "2", "target": "4"},
        {"source": "3", "target": "5"},
        {"source": "4", "target": "6"},
    ],
}

CONFIRMATION_FLOW = {
    "nodes": [
        {"id": "1", "type": "confirmation", "data": {"message": "Subscribe?"}},
        {"id": "2", "type": "message", "data": {"message": "Subscribed"}},
        {"id": "3", "type": "message", "data": {"message": "Maybe later"}},
    ],
    "edges": [
        {"source": "1", "target": "2", "sourceHandle": "yes"},
        {"source": "1", "target": "3", "sourceHandle": "no"},
    ],
}
