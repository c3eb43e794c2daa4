"""
Flow Engine

Advances a conversation flow node by node until it has to wait for the user,
reaches a terminal node, or runs out of graph.

The engine is a function of (graph, session snapshot, start node, input):
it copies the snapshot's variables, works on the copy, and hands everything
back in a RunResult. Persisting the outcome is the caller's job.

Per node type:

    message       emit text ({name} filled from variables), follow the first edge
    redirect      emit the URL, finish
    question      pause until input, then bind it to data.variable
    confirmation  pause until input, then follow the edge whose handle
                  matches the lower-cased input
    branch        always pause; the caller resolves the option node and
                  runs again FROM that option node
    branchOption  pass-through
    code          run in the sandbox, route on "success" / "error"
    unknown       emit the node data, finish

A node without a usable outgoing edge ends the run; so does an edge pointing
at a node that does not exist.
"""

# Python Packages
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

import structlog

# Graph
from .graph import (
    Edge,
    FlowGraph,
    Node,
    NodeType,
    build_node_map,
    find_edge_by_handle,
    get_node,
    outgoing_edges,
)

# Services
from .sandbox_service import CodeSandboxService

# Config
from ..config import flow_config

logger = structlog.get_logger(__name__)


# {name} placeholders in message text
PLACEHOLDER_PATTERN = re.compile(r"\{(\w+)\}")





# --------------------------------------------
# Engine Types
# --------------------------------------------

@dataclass
class SessionState:
    """ What the engine needs to know about a session... """

    current_node_id: Optional[str] = None
    variables: Dict[str, Any] = field(default_factory = dict)
    is_finished: bool = False

    @classmethod
    def from_session(cls, session) -> "SessionState":
        return cls(
            current_node_id = session.current_node_id,
            variables = dict(session.variables or {}),
            is_finished = bool(session.is_finished)
        )



@dataclass
class RunOutput:
    node_id: str
    type: str
    content: Any



@dataclass
class PauseDescriptor:
    """ The node the run stopped at and what it is waiting for... """

    type: str
    node_id: str
    message: Optional[str] = None
    variable: Optional[str] = None
    options: Optional[List[str]] = None



@dataclass
class RunResult:
    outputs: List[RunOutput] = field(default_factory = list)
    paused_for: Optional[PauseDescriptor] = None
    next_node_id: Optional[str] = None
    variables: Dict[str, Any] = field(default_factory = dict)
    finished: bool = False



@dataclass
class _Transition:
    target: Optional[str] = None
    pause: Optional[PauseDescriptor] = None
    finish: bool = False



class _Run:
    """ Mutable bookkeeping for a single run_from call... """

    def __init__(self, graph: FlowGraph, variables: Dict[str, Any], user_input):
        self.node_map = build_node_map(graph)
        self.edges: List[Edge] = graph.edges
        self.variables = variables
        self.user_input = user_input
        self.outputs: List[RunOutput] = []

    def emit(self, node: Node, output_type: str, content):
        self.outputs.append(RunOutput(node_id = node.id, type = output_type, content = content))

    def take_input(self):
        value, self.user_input = self.user_input, None
        return value

    def first_edge(self, node: Node) -> _Transition:
        outs = outgoing_edges(self.edges, node.id)
        if not outs:
            return _Transition(finish = True)
        return _Transition(target = outs[0].target)



def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def render_message(text: str, variables: Dict[str, Any]) -> str:
    """ Fill {name} placeholders from bound variables; unknown names stay as written... """

    def replace(match):
        name = match.group(1)
        return str(variables[name]) if name in variables else match.group(0)

    return PLACEHOLDER_PATTERN.sub(replace, text)





# --------------------------------------------
# Flow Engine
# --------------------------------------------

class FlowEngine:
    """
    Runs conversation flows.

    Args:
        sandbox_service: Executor for code nodes.
        max_steps:       Nodes visited per run before giving up; guards
                         against cycles of auto-advancing nodes.
    """

    def __init__(self, sandbox_service: CodeSandboxService = None, max_steps: int = None):
        self.sandbox_service = sandbox_service or CodeSandboxService()
        self.max_steps = max_steps or flow_config.FLOW_MAX_STEPS

        self._handlers: Dict[NodeType, Callable[[_Run, Node], _Transition]] = {
            NodeType.MESSAGE: self._on_message,
            NodeType.REDIRECT: self._on_redirect,
            NodeType.QUESTION: self._on_question,
            NodeType.CONFIRMATION: self._on_confirmation,
            NodeType.BRANCH: self._on_branch,
            NodeType.BRANCH_OPTION: self._on_branch_option,
            NodeType.CODE: self._on_code,
            NodeType.UNKNOWN: self._on_unknown,
        }


    def run_from(
        self,
        graph: FlowGraph,
        state: SessionState,
        start_node_id,
        user_input = None
    ) -> RunResult:
        """
        Execute from *start_node_id* until a pause or the end of the flow.

        Args:
            graph:         Flow of the session's bot.
            state:         Snapshot of the session. Never modified.
            start_node_id: Node to begin at. To resume a question or
                           confirmation, pass the paused node and the input.
            user_input:    Answer for the first waiting node, or None.

        Returns:
            RunResult. ``paused_for`` is set when the flow waits for input;
            otherwise ``finished`` is True.
        """

        variables = dict(state.variables or {})

        if state.is_finished:
            return RunResult(
                next_node_id = state.current_node_id,
                variables = variables,
                finished = True
            )

        run = _Run(graph, variables, user_input)
        node = get_node(run.node_map, start_node_id)
        steps = 0

        while node is not None:
            if steps >= self.max_steps:
                logger.warning(
                    "Flow step limit reached",
                    node_id = node.id,
                    steps = steps
                )
                run.emit(node, NodeType.UNKNOWN.value, {
                    "error": "Maximum flow steps exceeded",
                    "steps": steps,
                })
                break

            steps += 1
            transition = self._handlers[node.type](run, node)

            if transition.pause:
                return RunResult(
                    outputs = run.outputs,
                    paused_for = transition.pause,
                    variables = run.variables,
                    finished = False
                )

            if transition.finish:
                break

            node = get_node(run.node_map, transition.target)

        return RunResult(
            outputs = run.outputs,
            next_node_id = node.id if node is not None else None,
            variables = run.variables,
            finished = True
        )



    # ── Node Handlers ──────────────────────────────────────────────────────────

    def _on_message(self, run: _Run, node: Node) -> _Transition:
        run.emit(node, NodeType.MESSAGE.value, render_message(str(node.data.get("message") or ""), run.variables))
        return run.first_edge(node)


    def _on_redirect(self, run: _Run, node: Node) -> _Transition:
        run.emit(node, NodeType.REDIRECT.value, node.data.get("redirectUrl") or "")
        return _Transition(finish = True)


    def _on_question(self, run: _Run, node: Node) -> _Transition:
        if run.user_input is None:
            return _Transition(pause = PauseDescriptor(
                type = NodeType.QUESTION.value,
                node_id = node.id,
                message = node.data.get("message"),
                variable = node.data.get("variable")
            ))

        answer = run.take_input()
        variable = node.data.get("variable")
        if variable:
            run.variables[variable] = answer

        run.emit(node, NodeType.QUESTION.value, {
            "prompt": node.data.get("message"),
            "answer": answer,
            "variable": variable,
        })
        return run.first_edge(node)


    def _on_confirmation(self, run: _Run, node: Node) -> _Transition:
        if run.user_input is None:
            return _Transition(pause = PauseDescriptor(
                type = NodeType.CONFIRMATION.value,
                node_id = node.id,
                message = node.data.get("message")
            ))

        normalized = str(run.take_input()).lower()
        run.emit(node, NodeType.CONFIRMATION.value, {
            "prompt": node.data.get("message"),
            "answer": normalized,
        })

        edge = find_edge_by_handle(run.edges, node.id, normalized)
        if edge is None:
            return _Transition(finish = True)
        return _Transition(target = edge.target)


    def _on_branch(self, run: _Run, node: Node) -> _Transition:
        return _Transition(pause = PauseDescriptor(
            type = NodeType.BRANCH.value,
            node_id = node.id,
            message = node.data.get("message"),
            options = list(node.data.get("options") or [])
        ))


    def _on_branch_option(self, run: _Run, node: Node) -> _Transition:
        return run.first_edge(node)


    def _on_code(self, run: _Run, node: Node) -> _Transition:
        logger.debug("Executing code node", node_id = node.id)
        execution = self.sandbox_service.execute(node, run.variables)
        logger.debug(
            "Code node finished",
            node_id = node.id,
            success = execution.success
        )

        if not execution.success:
            run.emit(node, NodeType.CODE.value, {
                "error": execution.error,
                "success": False,
                "timestamp": _now(),
            })
            edge = find_edge_by_handle(run.edges, node.id, flow_config.CODE_ERROR_HANDLE)
            if edge is None:
                return _Transition(finish = True)
            return _Transition(target = edge.target)

        run.variables.update(execution.variables)
        run.emit(node, NodeType.CODE.value, {
            "result": execution.result,
            "success": True,
            "timestamp": _now(),
        })

        edge = find_edge_by_handle(run.edges, node.id, flow_config.CODE_SUCCESS_HANDLE)
        if edge is not None:
            return _Transition(target = edge.target)
        return run.first_edge(node)


    def _on_unknown(self, run: _Run, node: Node) -> _Transition:
        logger.warning("Unsupported node type", node_id = node.id, node_type = node.raw_type)
        run.emit(node, NodeType.UNKNOWN.value, dict(node.data))
        return _Transition(finish = True)





def run_from(graph: FlowGraph, state: SessionState, start_node_id, user_input = None) -> RunResult:
    """ Shortcut for FlowEngine().run_from(...)... """

    return FlowEngine().run_from(graph, state, start_node_id, user_input)
