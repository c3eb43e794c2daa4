"""
Service: FlowSessionService

Creates, loads and persists flow sessions.

Data table:
  flow_sessions → one row per session_id

Design:
  - history is append-only. New entries are concatenated onto a fresh list
    and assigned back, so the JSON column is always flagged dirty and prior
    entries are never touched.
  - Saves go through SQLAlchemy's version counter. A stale write raises
    ConflictException (409) after rolling back, so two respond calls on the
    same session can never interleave their read-modify-write.
"""

# Python Packages
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

# Database
from ...config.database import db

# Models
from ...models.flow_session import FlowSession

# Engine
from .flow_engine import RunResult

# Exceptions
from ...util.exceptions import ConflictException, ServiceException
from ...util import messages

logger = structlog.get_logger(__name__)


# History entry types written by the orchestrator itself
USER_INPUT = "user_input"
BRANCH_SELECT = "branch_select"

# Answered prompts restated in history after the user's input
RESTATED_TYPES = ("question", "confirmation")





def history_entry(node_id, entry_type: str, content, from_user: bool = False, awaiting_input: bool = None) -> Dict:
    entry = {
        "node_id": node_id,
        "type": entry_type,
        "content": content,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "from_user": from_user,
    }

    if awaiting_input is not None:
        entry["awaiting_input"] = awaiting_input

    return entry


def clean_history(history: List[Dict]) -> List[Dict]:
    """
    Display view of a session's history.

    Drops question/confirmation entries that carry structured content and
    directly follow the user's input for the same node: they only restate
    the answer the user just gave. The stored log is not changed.
    """

    cleaned = []
    previous = None

    for entry in history or []:
        is_restatement = (
            entry.get("type") in RESTATED_TYPES
            and isinstance(entry.get("content"), dict)
            and previous is not None
            and previous.get("type") == USER_INPUT
            and previous.get("node_id") == entry.get("node_id")
        )

        if not is_restatement:
            cleaned.append(entry)

        previous = entry

    return cleaned





class FlowSessionService:
    """
    Session persistence for the flow orchestrator.
    """

    # ── Session Management ─────────────────────────────────────────────────────

    def create_session(self, bot_id: int) -> FlowSession:
        """ New, unsaved session bound to *bot_id*... """

        session = FlowSession(
            session_id = str(uuid.uuid4()),
            bot_id = bot_id,
            current_node_id = None,
            variables = {},
            history = [],
            is_finished = False
        )
        db.session.add(session)
        return session


    def get_session(self, session_id: str) -> Optional[FlowSession]:
        return FlowSession.query.filter_by(session_id = session_id).first()


    def get_sessions_by_bot(self, bot_id: int) -> List[FlowSession]:
        return (
            FlowSession.query
            .filter_by(bot_id = bot_id)
            .order_by(FlowSession.created_at.desc(), FlowSession.flow_session_id.desc())
            .all()
        )

    # ── State Updates ──────────────────────────────────────────────────────────

    def append_history(self, session: FlowSession, entries: List[Dict]):
        if entries:
            session.history = list(session.history or []) + list(entries)


    def apply_run_result(self, session: FlowSession, result: RunResult, leading_entries: List[Dict] = None):
        """
        Fold one engine run into the session.

        History order: *leading_entries* (the user's own input), then the
        run's outputs in visiting order, then the pause prompt if any.
        """

        entries = list(leading_entries or [])

        entries.extend(
            history_entry(output.node_id, output.type, output.content)
            for output in result.outputs
        )

        if result.paused_for:
            entries.append(history_entry(
                result.paused_for.node_id,
                result.paused_for.type,
                result.paused_for.message,
                awaiting_input = True
            ))

        self.append_history(session, entries)
        session.variables = dict(result.variables)

        session.current_node_id = (
            result.paused_for.node_id if result.paused_for else result.next_node_id
        )
        session.is_finished = result.paused_for is None


    def finish(self, session: FlowSession):
        session.is_finished = True

    # ── Persistence ────────────────────────────────────────────────────────────

    def save(self, session: FlowSession) -> FlowSession:
        """
        Commit the session.

        Raises:
            ConflictException: another request saved this session first.
            ServiceException:  any other database failure.
        """

        session_id = session.session_id

        try:
            db.session.add(session)
            db.session.commit()

        except StaleDataError as error:
            db.session.rollback()
            logger.warning(
                "Concurrent update rejected",
                session_id = session_id
            )
            raise ConflictException(
                error_code = "SESSION_CONFLICT",
                message = messages.ERROR["SESSION_CONFLICT"],
                details = str(error)
            )

        except SQLAlchemyError as error:
            db.session.rollback()
            raise ServiceException(
                error_code = "SESSION_SAVE_FAILED",
                message = messages.ERROR["SESSION_SAVE_FAILED"],
                details = str(error),
                status_code = 500
            )

        if session.is_finished:
            logger.info("Flow session finished", session_id = session_id)

        return session
