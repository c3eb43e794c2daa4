import json
import time

import pytest

from flowbot.flows import sandbox
from flowbot.flows.services.graph import Node
from flowbot.flows.services.sandbox_service import CodeSandboxService


def code_node(code, timeout=None):
    data = {"code": code}
    if timeout is not None:
        data["timeout"] = timeout
    return Node.from_dict({"id": "c1", "type": "code", "data": data})


@pytest.fixture(scope="module")
def service():
    return CodeSandboxService()


def test_empty_code_is_rejected_without_a_process(service):
    result = service.execute(code_node("   "), {})

    assert result.success is False
    assert result.error == "No code provided"


def test_script_reads_and_writes_variables(service):
    source = (
        "set_variable('total', get_variable('a') + variables['b'])\n"
        "variables['seen'] = True\n"
        "result = {'sum': get_variable('total')}\n"
    )
    variables = {"a": 2, "b": 3}

    result = service.execute(code_node(source), variables)

    assert result.success is True
    assert result.result == {"sum": 5}
    assert result.variables == {"a": 2, "b": 3, "total": 5, "seen": True}
    assert variables == {"a": 2, "b": 3}


def test_runtime_error_is_reported(service):
    result = service.execute(code_node("result = 1 / 0"), {})

    assert result.success is False
    assert "division by zero" in result.error
    assert result.variables == {}


def test_syntax_error_is_reported(service):
    result = service.execute(code_node("def broken(:"), {})

    assert result.success is False
    assert result.error


def test_imports_are_blocked(service):
    result = service.execute(code_node("import os\nresult = os.getcwd()"), {})

    assert result.success is False


def test_private_attributes_are_blocked(service):
    result = service.execute(code_node("result = ().__class__"), {})

    assert result.success is False


def test_open_is_not_available(service):
    result = service.execute(code_node("result = open('/etc/passwd').read()"), {})

    assert result.success is False


def test_runaway_script_is_cut_off(service):
    started = time.monotonic()

    result = service.execute(code_node("while True:\n    pass", timeout=300), {})

    assert result.success is False
    assert result.error == "Code execution timed out after 300 ms"
    assert time.monotonic() - started < service.startup_timeout + 5


def test_helpers_are_available(service):
    source = (
        "data = json.loads('{\"n\": 16}')\n"
        "log('computing', data['n'])\n"
        "result = [math.sqrt(data['n']), callable(http.get), datetime.now().year > 2000]\n"
    )

    result = service.execute(code_node(source), {})

    assert result.success is True
    assert result.result == [4.0, True, True]


@pytest.mark.parametrize("raw, expected", [
    (None, 5000),
    (0, 5000),
    (-10, 5000),
    ("abc", 5000),
    (250, 250),
    ("1500", 1500),
])
def test_timeout_parsing(raw, expected):
    assert CodeSandboxService.get_timeout_ms(code_node("x = 1", timeout=raw)) == expected


def test_execute_script_serializes_unknown_types_as_text():
    payload = sandbox.execute_script("result = datetime.timedelta(seconds=1)", {}, 1.0)

    assert payload["success"] is True
    assert payload["result"] == "0:00:01"


def test_execute_script_keeps_augmented_assignment():
    payload = sandbox.execute_script("n = 1\nn += 2\nresult = n", {}, 1.0)

    assert payload["result"] == 3


@pytest.mark.parametrize("source", [
    "async def load():\n    return 1\n",
    "async def load():\n    await other()\n",
])
def test_async_code_is_rejected_at_compile_time(source):
    payload = sandbox.execute_script(source, {}, 1.0)

    assert payload["success"] is False
    assert "not allowed" in payload["error"]
    assert payload["variables"] == {}


class FakeResponse:
    def __init__(self, status_code=200, text="", headers=None):
        self.status_code = status_code
        self.ok = status_code < 400
        self.text = text
        self.headers = headers or {}

    def json(self):
        return json.loads(self.text)


@pytest.fixture
def http_calls(monkeypatch):
    calls = []
    responses = []

    def fake_request(method, url, **kwargs):
        calls.append((method, url, kwargs))
        return responses.pop(0)

    monkeypatch.setattr(sandbox.requests, "request", fake_request)
    return calls, responses


def test_http_response_is_a_plain_dict(http_calls):
    calls, responses = http_calls
    responses.append(FakeResponse(201, '{"id": 9}', {"Content-Type": "application/json"}))

    payload = sandbox.execute_script(
        "result = http.post('https://api.example.com/items', json={'name': 'x'}, headers={'X-Key': 'k'})",
        {},
        2.5,
    )

    assert payload["success"] is True
    assert payload["result"] == {
        "status": 201,
        "ok": True,
        "headers": {"Content-Type": "application/json"},
        "text": '{"id": 9}',
        "json": {"id": 9},
    }
    assert calls == [(
        "POST",
        "https://api.example.com/items",
        {"timeout": 2.5, "allow_redirects": False, "json": {"name": "x"}, "headers": {"X-Key": "k"}},
    )]


def test_http_non_json_body_gives_none(http_calls):
    calls, responses = http_calls
    responses.append(FakeResponse(500, "<html>oops</html>"))

    payload = sandbox.execute_script("result = http.get('https://example.com', params={'q': 1})", {}, 1.0)

    assert payload["result"]["json"] is None
    assert payload["result"]["ok"] is False
    assert payload["result"]["text"] == "<html>oops</html>"
    assert calls[0][2]["params"] == {"q": 1}


def test_http_rejects_unsupported_options(http_calls):
    calls, _ = http_calls

    payload = sandbox.execute_script("result = http.get('https://example.com', verify=False)", {}, 1.0)

    assert payload["success"] is False
    assert payload["error"] == "Unsupported http option(s): verify"
    assert calls == []


@pytest.mark.parametrize("method", ["get", "post", "put", "patch", "delete"])
def test_http_methods_map_to_verbs(http_calls, method):
    calls, responses = http_calls
    responses.append(FakeResponse(204))

    sandbox.execute_script(f"result = http.{method}('https://example.com')", {}, 1.0)

    assert calls[0][0] == method.upper()
