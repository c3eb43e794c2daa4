"""
Service: BotService

Bot records, their conversation flows, and the chat histories recorded
against them.

Handles:
    - Create Bot
    - Get Bot / List Bots of a user
    - Delete Bot (with its sessions and customisation)
    - Update Conversation Flow
    - List / read chat histories (flow sessions) of a bot
"""

# Python Packages
from typing import Dict, Optional

import structlog
from sqlalchemy.exc import SQLAlchemyError

# Database
from ...config.database import db

# Models
from ...models.chat_bot import ChatBot, empty_flow
from ...models.flow_session import FlowSession

# Flow Services
from ...flows.services.session_service import FlowSessionService, clean_history

# Exceptions
from ...util.exceptions import NotFoundException, ServiceException
from ...util import messages

logger = structlog.get_logger(__name__)





def to_isoformat(value) -> Optional[str]:
    return value.isoformat() if value else None


def bot_to_dict(bot: ChatBot) -> Dict:
    return {
        "bot_id": bot.bot_id,
        "user_id": bot.user_id,
        "name": bot.name,
        "description": bot.description,
        "conversation_flow": bot.conversation_flow or empty_flow(),
        "created_at": to_isoformat(bot.created_at),
        "updated_at": to_isoformat(bot.updated_at),
    }


def session_to_dict(session: FlowSession) -> Dict:
    return {
        "session_id": session.session_id,
        "bot_id": session.bot_id,
        "current_node_id": session.current_node_id,
        "variables": session.variables or {},
        "history": session.history or [],
        "is_finished": session.is_finished,
        "created_at": to_isoformat(session.created_at),
        "last_updated_at": to_isoformat(session.last_updated_at),
    }





class BotService:

    def __init__(self):
        self.session_service = FlowSessionService()


    def create_bot(self, args: Dict) -> Dict:
        """
        Create a bot.

        Args:
            args (dict):
                {
                    "name": str,
                    "description": str (optional),
                    "user_id": str (optional),
                    "conversation_flow": dict (optional, already validated)
                }

        Returns:
            dict
        """

        try:
            bot = ChatBot(
                name = args.get("name").strip(),
                description = args.get("description"),
                user_id = args.get("user_id"),
                conversation_flow = args.get("conversation_flow") or empty_flow()
            )
            db.session.add(bot)
            db.session.commit()

        except SQLAlchemyError as error:
            db.session.rollback()
            raise ServiceException(
                error_code = "BOT_CREATE_FAILED",
                message = messages.ERROR["BOT_CREATE_FAILED"],
                details = str(error)
            )

        logger.info("Bot created", bot_id = bot.bot_id)
        return bot_to_dict(bot)


    def get_bot(self, bot_id: int) -> ChatBot:
        """
        Raises:
            NotFoundException: no bot with this id.
        """

        bot = db.session.get(ChatBot, bot_id)
        if not bot:
            raise NotFoundException(
                message = messages.ERROR["BOT_NOT_FOUND"],
                error_code = "BOT_NOT_FOUND"
            )
        return bot


    def list_bots(self, user_id: Optional[str] = None) -> Dict:
        """ Bots of *user_id* (all bots when None), newest first... """

        query = ChatBot.query
        if user_id:
            query = query.filter_by(user_id = user_id)

        bots = query.order_by(ChatBot.created_at.desc(), ChatBot.bot_id.desc()).all()

        logger.info("Fetched bots", user_id = user_id, count = len(bots))
        return {"bots": [bot_to_dict(bot) for bot in bots], "total": len(bots)}


    def delete_bot(self, bot_id: int, user_id: Optional[str] = None):
        """
        Delete a bot together with its flow sessions and customisation.

        When *user_id* is given the bot must belong to that user.

        Raises:
            NotFoundException: no such bot (for this user).
        """

        bot = self.get_bot(bot_id)
        if user_id and bot.user_id != user_id:
            raise NotFoundException(
                message = messages.ERROR["BOT_NOT_FOUND"],
                error_code = "BOT_NOT_FOUND"
            )

        try:
            db.session.delete(bot)
            db.session.commit()

        except SQLAlchemyError as error:
            db.session.rollback()
            raise ServiceException(
                error_code = "BOT_DELETE_FAILED",
                message = messages.ERROR["BOT_DELETE_FAILED"],
                details = str(error),
                status_code = 500
            )

        logger.info("Bot and associated data deleted", bot_id = bot_id, user_id = user_id)


    def update_flow(self, bot_id: int, conversation_flow: Dict) -> Dict:
        """
        Replace a bot's conversation flow.

        Sessions already in flight keep their current_node_id; if that node
        is gone from the new flow the next respond call ends the session.
        """

        bot = self.get_bot(bot_id)

        try:
            bot.conversation_flow = conversation_flow
            db.session.commit()

        except SQLAlchemyError as error:
            db.session.rollback()
            raise ServiceException(
                error_code = "BOT_FLOW_UPDATE_FAILED",
                message = messages.ERROR["BOT_FLOW_UPDATE_FAILED"],
                details = str(error)
            )

        logger.info(
            "Conversation flow updated",
            bot_id = bot_id,
            nodes = len(conversation_flow.get("nodes", []))
        )
        return bot_to_dict(bot)



    # ── Chat Histories ─────────────────────────────────────────────────────────

    def get_all_chat_histories(self, bot_id: int) -> Dict:
        """ All flow sessions of a bot, newest first... """

        self.get_bot(bot_id)
        sessions = self.session_service.get_sessions_by_bot(bot_id)

        return {
            "bot_id": bot_id,
            "total_sessions": len(sessions),
            "sessions": [session_to_dict(session) for session in sessions],
        }


    def get_chat_history_by_session(self, bot_id: int, session_id: str) -> Dict:
        """
        One session's history, cleaned for display.

        Raises:
            NotFoundException: unknown bot, or the session is not this bot's.
        """

        self.get_bot(bot_id)

        session = self.session_service.get_session(session_id)
        if not session or session.bot_id != bot_id:
            raise NotFoundException(
                message = messages.ERROR["CHAT_HISTORY_NOT_FOUND"],
                error_code = "CHAT_HISTORY_NOT_FOUND"
            )

        history = session.history or []
        cleaned = clean_history(history)

        logger.info(
            "Chat history cleaned",
            session_id = session_id,
            original_length = len(history),
            cleaned_length = len(cleaned)
        )

        return {
            "bot_id": bot_id,
            "session_id": session_id,
            "history": cleaned,
            "current_node_id": session.current_node_id,
            "is_finished": session.is_finished,
            "created_at": to_isoformat(session.created_at),
            "last_updated_at": to_isoformat(session.last_updated_at),
        }
