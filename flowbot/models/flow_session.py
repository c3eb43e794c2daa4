"""
Model: FlowSession
Table: flow_sessions

One user's traversal of a bot's conversation flow.

history is an append-only JSON list; each entry looks like:
  {"node_id": "2", "type": "message" | "question" | "confirmation" | "branch"
                         | "code" | "redirect" | "unknown"
                         | "user_input" | "branch_select",
   "content": str | dict, "timestamp": ISO-8601, "from_user": bool,
   "awaiting_input": bool (only on pause entries)}

version is the optimistic lock: a write carrying a stale version raises
StaleDataError on flush.
"""

# Python Packages
from sqlalchemy import func

# Database
from ..config.database import db





class FlowSession(db.Model):
    """ Resumable execution state of a conversation flow... """

    # Table Name
    __tablename__ = "flow_sessions"

    flow_session_id = db.Column(db.Integer, primary_key = True, autoincrement = True)

    session_id = db.Column(
        db.String(64),
        nullable = False,
        unique = True,
        index = True,
        doc = "UUID handed to the client."
    )

    bot_id = db.Column(
        db.Integer,
        db.ForeignKey("chat_bots.bot_id", ondelete = "CASCADE"),
        nullable = False,
        index = True
    )

    current_node_id = db.Column(
        db.String(255),
        nullable = True,
        doc = "Node awaiting input, or null when not paused."
    )

    variables = db.Column(db.JSON, nullable = False, default = dict)

    history = db.Column(db.JSON, nullable = False, default = list)

    is_finished = db.Column(db.Boolean, nullable = False, default = False)

    version = db.Column(db.Integer, nullable = False)

    created_at = db.Column(
        db.DateTime(timezone = True),
        nullable = False,
        server_default = func.now()
    )

    last_updated_at = db.Column(
        db.DateTime(timezone = True),
        nullable = False,
        server_default = func.now(),
        onupdate = func.now()
    )

    # Relationship
    bot = db.relationship(
        "ChatBot",
        backref = db.backref("flow_sessions", cascade = "all, delete")
    )

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self):
        return f"<FlowSession {self.session_id} node={self.current_node_id} finished={self.is_finished}>"
