"""
Bot Services Package

Service responsibilities:
  BotService           : Bot records, conversation flow updates, chat history reads
  CustomisationService : Chat widget styling of a bot
"""

from .bot_service import BotService
from .customisation_service import CustomisationService

__all__ = [
    "BotService",
    "CustomisationService",
]
