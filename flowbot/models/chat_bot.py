"""
Model: ChatBot
Table: chat_bots

A bot owned by a user. The authored conversation flow is stored as JSON:
  {"nodes": [{"id", "type", "data"}, ...],
   "edges": [{"source", "target", "sourceHandle"?}, ...]}
"""

# Python Packages
from sqlalchemy import func

# Database
from ..config.database import db





def empty_flow():
    return {"nodes": [], "edges": []}



class ChatBot(db.Model):
    """ A chatbot and its conversation flow... """

    # Table Name
    __tablename__ = "chat_bots"

    bot_id = db.Column(db.Integer, primary_key = True, autoincrement = True)

    user_id = db.Column(
        db.String(255),
        nullable = True,
        doc = "Identifier of the user who owns this bot."
    )

    name = db.Column(db.String(255), nullable = False)

    description = db.Column(db.Text, nullable = True)

    conversation_flow = db.Column(
        db.JSON,
        nullable = False,
        default = empty_flow,
        doc = "Flow graph definition. See module docstring."
    )

    created_at = db.Column(
        db.DateTime(timezone = True),
        nullable = False,
        server_default = func.now()
    )

    updated_at = db.Column(
        db.DateTime(timezone = True),
        nullable = False,
        server_default = func.now(),
        onupdate = func.now()
    )

    def __repr__(self):
        return f"<ChatBot {self.bot_id} {self.name}>"
