import json

import structlog
from structlog.testing import capture_logs

from flowbot.flows.services.flow_engine import FlowEngine, SessionState
from flowbot.util.logger import configure_logging

from conftest import StubSandbox, make_graph


def test_events_are_json_lines_with_keyword_context(capsys):
    configure_logging("INFO")

    structlog.get_logger("flowbot.test").info("Bot created", bot_id=7)

    line = capsys.readouterr().out.strip().splitlines()[-1]
    record = json.loads(line)
    assert record["event"] == "Bot created"
    assert record["bot_id"] == 7
    assert record["level"] == "info"
    assert "timestamp" in record


def test_level_filters_lower_events(capsys):
    configure_logging("WARNING")

    structlog.get_logger("flowbot.test").info("hidden")

    assert capsys.readouterr().out == ""
    configure_logging("INFO")


def test_step_limit_is_logged_with_context():
    graph = make_graph(
        [{"id": "1", "type": "message", "data": {"message": "loop"}}],
        [{"source": "1", "target": "1"}],
    )

    with capture_logs() as logs:
        FlowEngine(sandbox_service=StubSandbox(), max_steps=3).run_from(graph, SessionState(), "1")

    assert {"event": "Flow step limit reached", "node_id": "1", "steps": 3, "log_level": "warning"} in logs


def test_unsupported_node_type_is_logged_by_its_authored_name():
    graph = make_graph([{"id": "7", "type": "carousel", "data": {"cards": 2}}])

    with capture_logs() as logs:
        result = FlowEngine(sandbox_service=StubSandbox()).run_from(graph, SessionState(), "7")

    assert result.outputs[0].content == {"cards": 2}
    assert {
        "event": "Unsupported node type",
        "node_id": "7",
        "node_type": "carousel",
        "log_level": "warning",
    } in logs
