"""
Models Package
Registers all SQLAlchemy ORM models so they are discoverable by Flask-SQLAlchemy.

Import order matters: models with foreign keys must be imported after
the models they reference.
"""

from .chat_bot import ChatBot
from .flow_session import FlowSession
from .bot_customisation import BotCustomisation

__all__ = [
    "ChatBot",
    "FlowSession",
    "BotCustomisation",
]
