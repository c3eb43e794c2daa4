import pytest

from flowbot.flows.services.flow_engine import FlowEngine, SessionState, render_message
from flowbot.flows.services.graph import FlowGraph, build_node_map, find_branch_option_node
from flowbot.flows.services.sandbox_service import SandboxResult

from conftest import BRANCH_FLOW, CONFIRMATION_FLOW, GREETING_FLOW, StubSandbox, make_graph


@pytest.fixture
def engine():
    return FlowEngine(sandbox_service=StubSandbox())


def test_question_without_input_pauses_every_time(engine):
    graph = FlowGraph.from_dict(GREETING_FLOW)

    for _ in range(3):
        result = engine.run_from(graph, SessionState(), "1")

        assert result.paused_for.type == "question"
        assert result.paused_for.node_id == "1"
        assert result.paused_for.variable == "name"
        assert result.outputs == []
        assert result.finished is False
        assert result.next_node_id is None


def test_resume_binds_variable_and_renders_message(engine):
    graph = FlowGraph.from_dict(GREETING_FLOW)
    state = SessionState(current_node_id="1")

    result = engine.run_from(graph, state, "1", "Alice")

    assert result.variables == {"name": "Alice"}
    assert [output.type for output in result.outputs] == ["question", "message"]
    assert result.outputs[0].content == {"prompt": "What is your name?", "answer": "Alice", "variable": "name"}
    assert result.outputs[1].content == "Hi Alice"
    assert result.finished is True
    assert result.next_node_id == "2"


def test_engine_does_not_touch_the_snapshot(engine):
    state = SessionState(current_node_id="1", variables={"existing": 1})

    result = engine.run_from(FlowGraph.from_dict(GREETING_FLOW), state, "1", "Bob")

    assert state.variables == {"existing": 1}
    assert result.variables == {"existing": 1, "name": "Bob"}


def test_input_is_consumed_by_the_first_waiting_node(engine):
    graph = make_graph(
        [
            {"id": "1", "type": "question", "data": {"message": "First?", "variable": "a"}},
            {"id": "2", "type": "question", "data": {"message": "Second?", "variable": "b"}},
        ],
        [{"source": "1", "target": "2"}],
    )

    result = engine.run_from(graph, SessionState(), "1", "one")

    assert result.variables == {"a": "one"}
    assert result.paused_for.node_id == "2"


@pytest.mark.parametrize("answer", ["YES", "yes", "Yes"])
def test_confirmation_answers_are_normalised(engine, answer):
    result = engine.run_from(FlowGraph.from_dict(CONFIRMATION_FLOW), SessionState(), "1", answer)

    assert result.outputs[0].content == {"prompt": "Subscribe?", "answer": "yes"}
    assert result.outputs[1].content == "Subscribed"


def test_unmatched_confirmation_is_a_dead_end(engine):
    result = engine.run_from(FlowGraph.from_dict(CONFIRMATION_FLOW), SessionState(), "1", "perhaps")

    assert [output.type for output in result.outputs] == ["confirmation"]
    assert result.finished is True
    assert result.next_node_id == "1"


@pytest.mark.parametrize("user_input", [None, "Yes", "0", 1])
def test_branch_always_pauses(engine, user_input):
    graph = FlowGraph.from_dict(BRANCH_FLOW)

    result = engine.run_from(graph, SessionState(), "2", user_input)

    assert result.paused_for.type == "branch"
    assert result.paused_for.options == ["Yes", "No"]
    assert result.next_node_id is None
    assert result.outputs == []


def test_resume_at_branch_option(engine):
    graph = FlowGraph.from_dict(BRANCH_FLOW)
    option_id = find_branch_option_node(build_node_map(graph), build_node_map(graph)["2"], "No")

    result = engine.run_from(graph, SessionState(current_node_id="2"), option_id)

    assert [(output.type, output.content) for output in result.outputs] == [
        ("redirect", "https://example.com/bye"),
    ]
    assert result.finished is True


def test_message_chain_runs_until_pause(engine):
    result = engine.run_from(FlowGraph.from_dict(BRANCH_FLOW), SessionState(), "1")

    assert [output.content for output in result.outputs] == ["Welcome"]
    assert result.paused_for.node_id == "2"


def test_finished_session_is_a_no_op(engine):
    state = SessionState(current_node_id="2", variables={"name": "Alice"}, is_finished=True)

    result = engine.run_from(FlowGraph.from_dict(GREETING_FLOW), state, "2")

    assert result.outputs == []
    assert result.paused_for is None
    assert result.finished is True
    assert result.next_node_id == "2"
    assert result.variables == {"name": "Alice"}


def test_dangling_edge_ends_the_run(engine):
    graph = make_graph(
        [{"id": "1", "type": "message", "data": {"message": "Bye"}}],
        [{"source": "1", "target": "missing"}],
    )

    result = engine.run_from(graph, SessionState(), "1")

    assert [output.content for output in result.outputs] == ["Bye"]
    assert result.finished is True
    assert result.next_node_id is None


def test_missing_start_node_finishes_without_output(engine):
    result = engine.run_from(FlowGraph.from_dict(GREETING_FLOW), SessionState(), "nope")

    assert result.outputs == []
    assert result.finished is True


def test_unknown_node_type_is_terminal(engine):
    graph = make_graph(
        [
            {"id": "1", "type": "carousel", "data": {"cards": 3}},
            {"id": "2", "type": "message", "data": {"message": "never"}},
        ],
        [{"source": "1", "target": "2"}],
    )

    result = engine.run_from(graph, SessionState(), "1")

    assert [(output.type, output.content) for output in result.outputs] == [("unknown", {"cards": 3})]
    assert result.finished is True


def test_branch_option_is_pass_through(engine):
    graph = make_graph(
        [
            {"id": "o", "type": "branchOption", "data": {"label": "Go"}},
            {"id": "m", "type": "message", "data": {"message": "Went"}},
        ],
        [{"source": "o", "target": "m"}],
    )

    result = engine.run_from(graph, SessionState(), "o")

    assert [output.node_id for output in result.outputs] == ["m"]


CODE_FLOW = {
    "nodes": [
        {"id": "1", "type": "code", "data": {"code": "result = 1"}},
        {"id": "ok", "type": "message", "data": {"message": "Total {total}"}},
        {"id": "bad", "type": "message", "data": {"message": "Failed"}},
    ],
    "edges": [
        {"source": "1", "target": "ok", "sourceHandle": "success"},
        {"source": "1", "target": "bad", "sourceHandle": "error"},
    ],
}


def test_code_success_merges_variables_and_follows_success_edge():
    sandbox = StubSandbox(SandboxResult(success=True, result=42, variables={"total": 42}))
    engine = FlowEngine(sandbox_service=sandbox)

    result = engine.run_from(FlowGraph.from_dict(CODE_FLOW), SessionState(variables={"a": 1}), "1")

    assert sandbox.calls == [("1", {"a": 1})]
    assert result.variables == {"a": 1, "total": 42}
    code_output = result.outputs[0]
    assert code_output.type == "code"
    assert code_output.content["success"] is True
    assert code_output.content["result"] == 42
    assert "timestamp" in code_output.content
    assert result.outputs[1].content == "Total 42"


def test_code_failure_follows_error_edge_without_merging():
    sandbox = StubSandbox(SandboxResult(success=False, error="boom", variables={"total": 1}))
    engine = FlowEngine(sandbox_service=sandbox)

    result = engine.run_from(FlowGraph.from_dict(CODE_FLOW), SessionState(), "1")

    assert result.outputs[0].content["success"] is False
    assert result.outputs[0].content["error"] == "boom"
    assert result.outputs[1].content == "Failed"
    assert result.variables == {}


def test_code_failure_without_error_edge_is_terminal():
    graph = make_graph(
        [
            {"id": "1", "type": "code", "data": {"code": "x"}},
            {"id": "2", "type": "message", "data": {"message": "next"}},
        ],
        [{"source": "1", "target": "2", "sourceHandle": "success"}],
    )
    engine = FlowEngine(sandbox_service=StubSandbox(SandboxResult(success=False, error="boom")))

    result = engine.run_from(graph, SessionState(), "1")

    assert [output.type for output in result.outputs] == ["code"]
    assert result.finished is True


def test_code_success_without_success_edge_takes_first_edge():
    graph = make_graph(
        [
            {"id": "1", "type": "code", "data": {"code": "x"}},
            {"id": "2", "type": "message", "data": {"message": "first"}},
            {"id": "3", "type": "message", "data": {"message": "second"}},
        ],
        [{"source": "1", "target": "2"}, {"source": "1", "target": "3"}],
    )
    engine = FlowEngine(sandbox_service=StubSandbox())

    result = engine.run_from(graph, SessionState(), "1")

    assert result.outputs[-1].content == "first"


def test_cycle_of_messages_stops_at_step_limit():
    graph = make_graph(
        [
            {"id": "1", "type": "message", "data": {"message": "ping"}},
            {"id": "2", "type": "message", "data": {"message": "pong"}},
        ],
        [{"source": "1", "target": "2"}, {"source": "2", "target": "1"}],
    )
    engine = FlowEngine(sandbox_service=StubSandbox(), max_steps=5)

    result = engine.run_from(graph, SessionState(), "1")

    assert len(result.outputs) == 6
    assert result.outputs[-1].type == "unknown"
    assert result.outputs[-1].content["error"] == "Maximum flow steps exceeded"
    assert result.finished is True


def test_render_message_leaves_unknown_placeholders():
    assert render_message("Hi {name}, {missing}", {"name": "Ana"}) == "Hi Ana, {missing}"
