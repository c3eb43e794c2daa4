"""
Service: FlowService

Orchestrates conversation flows over HTTP requests:

    start_flow(bot_id)        new session, run from the start node
    respond(session_id, ...)  feed user input / branch choice to the node
                              the session is waiting on

The engine decides what happens; this layer loads the graph and the session,
checks the caller's input BEFORE anything is mutated, writes the outcome to
history in order (user input, outputs, pause prompt) and saves once.
"""

# Python Packages
from typing import Dict, List, Optional

import structlog

# Database
from ...config.database import db

# Models
from ...models.chat_bot import ChatBot
from ...models.flow_session import FlowSession

# Services
from .graph import (
    FlowGraph,
    NodeType,
    build_node_map,
    find_branch_option_node,
    find_start_node,
    get_node,
)
from .flow_engine import FlowEngine, PauseDescriptor, RunOutput, RunResult, SessionState
from .session_service import BRANCH_SELECT, USER_INPUT, FlowSessionService, history_entry

# Config
from ..config import flow_config

# Exceptions
from ...util.exceptions import NotFoundException, ValidationException
from ...util import messages

logger = structlog.get_logger(__name__)


# Output types shown to the user as chat messages
DISPLAYED_OUTPUT_TYPES = (NodeType.MESSAGE.value, NodeType.REDIRECT.value)





def format_messages_for_display(outputs: List[RunOutput], paused_for: Optional[PauseDescriptor] = None) -> List[Dict]:
    """
    Turn one run's outputs into chat messages.

    Only message and redirect outputs are shown; answered prompts and code
    results stay in history. The prompt the flow is waiting on comes last
    with ``awaiting_input`` set.
    """

    display = []

    for output in outputs:
        if output.type not in DISPLAYED_OUTPUT_TYPES:
            continue

        content = output.content
        if isinstance(content, dict):
            content = content.get("prompt") or content.get("message") or ""
        if output.type == NodeType.REDIRECT.value and not isinstance(output.content, str):
            content = f"Redirecting to: {output.content}"

        display.append({
            "type": output.type,
            "content": content,
            "node_id": output.node_id,
            "awaiting_input": False,
        })

    if paused_for:
        display.append({
            "type": paused_for.type,
            "content": paused_for.message or flow_config.AWAITING_INPUT_FALLBACK_TEXT,
            "node_id": paused_for.node_id,
            "options": paused_for.options or [],
            "variable": paused_for.variable,
            "awaiting_input": True,
        })

    return display


def awaiting_input_payload(paused_for: Optional[PauseDescriptor]) -> Optional[Dict]:
    if not paused_for:
        return None

    return {
        "type": paused_for.type,
        "node_id": paused_for.node_id,
        "variable": paused_for.variable,
        "options": paused_for.options,
    }





class FlowService:
    """
    Start / respond orchestration on top of FlowEngine.
    """

    def __init__(self, engine: FlowEngine = None):
        self.engine = engine or FlowEngine()
        self.session_service = FlowSessionService()



    # ── Start ──────────────────────────────────────────────────────────────────

    def start_flow(self, bot_id: int) -> Dict:
        """
        Open a new session for *bot_id* and run until the first pause.

        Returns:
            {"session_id", "messages", "awaiting_input", "finished", "variables"}

        Raises:
            NotFoundException: unknown bot.
        """

        bot = self._get_bot(bot_id, "BOT_NOT_FOUND")
        graph = FlowGraph.from_dict(bot.conversation_flow)
        session = self.session_service.create_session(bot.bot_id)

        start_node = find_start_node(graph)
        if not start_node:
            self.session_service.finish(session)
            self.session_service.save(session)
            return self._response(session)

        result = self.engine.run_from(graph, SessionState.from_session(session), start_node.id)
        return self._persist(session, result)



    # ── Respond ────────────────────────────────────────────────────────────────

    def respond(self, session_id: str, user_input = None, option_index_or_label = None) -> Dict:
        """
        Continue a session with the user's answer.

        Args:
            session_id:            Session to continue.
            user_input:            Answer to a question / confirmation; also
                                   accepted as the selector at a branch.
            option_index_or_label: Branch choice, index or label.

        Raises:
            NotFoundException:   unknown session, or its bot is gone.
            ValidationException: input missing or branch choice invalid.
                                 The session is left untouched.
        """

        session = self.session_service.get_session(session_id)
        if not session:
            raise NotFoundException(
                message = messages.ERROR["SESSION_NOT_FOUND"],
                error_code = "SESSION_NOT_FOUND"
            )

        if session.is_finished:
            return self._response(session)

        bot = self._get_bot(session.bot_id, "BOT_FOR_SESSION_NOT_FOUND")
        graph = FlowGraph.from_dict(bot.conversation_flow)
        node_map = build_node_map(graph)

        waiting_node_id = session.current_node_id
        if not waiting_node_id:
            start_node = find_start_node(graph)
            if not start_node:
                self.session_service.finish(session)
                self.session_service.save(session)
                return self._response(session)
            waiting_node_id = start_node.id

        waiting_node = get_node(node_map, waiting_node_id)
        if not waiting_node:
            logger.warning(
                "Waiting node missing from flow",
                session_id = session_id,
                node_id = waiting_node_id
            )
            self.session_service.finish(session)
            self.session_service.save(session)
            return self._response(session, error = messages.ERROR["SESSION_NODE_MISSING"])

        state = SessionState.from_session(session)

        if waiting_node.type is NodeType.BRANCH:
            selector = option_index_or_label if option_index_or_label is not None else user_input
            if selector is None or (isinstance(selector, str) and not selector.strip()):
                raise ValidationException(
                    message = messages.ERROR["BRANCH_SELECTION_REQUIRED"],
                    error_code = "BRANCH_SELECTION_REQUIRED"
                )

            option_node_id = find_branch_option_node(node_map, waiting_node, selector)
            if not option_node_id:
                raise ValidationException(
                    message = messages.ERROR["BRANCH_OPTION_NOT_RECOGNIZED"],
                    error_code = "BRANCH_OPTION_NOT_RECOGNIZED"
                )

            user_entry = history_entry(
                waiting_node.id,
                BRANCH_SELECT,
                {"selected_option_node_id": option_node_id, "selected": selector},
                from_user = True
            )
            result = self.engine.run_from(graph, state, option_node_id)

        elif waiting_node.type in (NodeType.QUESTION, NodeType.CONFIRMATION):
            if user_input is None:
                raise ValidationException(
                    message = messages.ERROR["INPUT_REQUIRED"],
                    error_code = "INPUT_REQUIRED"
                )

            user_entry = history_entry(waiting_node.id, USER_INPUT, user_input, from_user = True)
            result = self.engine.run_from(graph, state, waiting_node.id, user_input)

        else:
            user_entry = None
            result = self.engine.run_from(graph, state, waiting_node.id)

        return self._persist(session, result, [user_entry] if user_entry else None)



    # ── Helpers ────────────────────────────────────────────────────────────────

    def _get_bot(self, bot_id: int, error_code: str) -> ChatBot:
        bot = db.session.get(ChatBot, bot_id)
        if not bot:
            raise NotFoundException(message = messages.ERROR[error_code], error_code = error_code)
        return bot


    def _persist(self, session: FlowSession, result: RunResult, leading_entries: List[Dict] = None) -> Dict:
        self.session_service.apply_run_result(session, result, leading_entries)
        self.session_service.save(session)
        return self._response(session, result)


    def _response(self, session: FlowSession, result: RunResult = None, error: str = None) -> Dict:
        outputs = result.outputs if result else []
        paused_for = result.paused_for if result else None

        response = {
            "session_id": session.session_id,
            "messages": format_messages_for_display(outputs, paused_for),
            "awaiting_input": awaiting_input_payload(paused_for),
            "finished": bool(session.is_finished),
            "variables": session.variables or {},
        }

        if error:
            response["error"] = error

        return response
