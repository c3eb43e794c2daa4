"""
Service: CustomisationService

Chat widget styling of a bot. One record per bot, created on first save;
later saves only overwrite the fields they carry.
"""

# Python Packages
from typing import Dict, Optional

import structlog
from sqlalchemy.exc import SQLAlchemyError

# Database
from ...config.database import db

# Models
from ...models.bot_customisation import BotCustomisation

# Services
from .bot_service import BotService, to_isoformat

# Exceptions
from ...util.exceptions import ServiceException
from ...util import messages

logger = structlog.get_logger(__name__)


# Fields a client may set, in display order
CUSTOMISATION_FIELDS = (
    "header_title",
    "header_subtitle",
    "placeholder",
    "primary_color",
    "background_color",
    "header_background",
    "user_message_color",
    "bot_message_color",
    "message_background_color",
    "text_color",
    "font_family",
    "border_radius",
    "chat_custom_css",
    "use_chat_custom_css",
    "button_background",
    "button_color",
    "button_size",
    "button_border_radius",
    "button_position",
    "button_bottom",
    "button_right",
    "button_left",
    "button_custom_css",
    "use_button_custom_css",
)





def customisation_to_dict(customisation: BotCustomisation) -> Dict:
    data = {"bot_id": customisation.bot_id}
    data.update({name: getattr(customisation, name) for name in CUSTOMISATION_FIELDS})
    data["created_at"] = to_isoformat(customisation.created_at)
    data["updated_at"] = to_isoformat(customisation.updated_at)
    return data





class CustomisationService:

    def __init__(self):
        self.bot_service = BotService()


    def get_customisation(self, bot_id: int) -> Optional[Dict]:
        """ Saved styling of a bot, or None when it was never customised... """

        bot = self.bot_service.get_bot(bot_id)

        if bot.customisation is None:
            logger.info("No customisation found", bot_id = bot_id)
            return None

        return customisation_to_dict(bot.customisation)


    def save_customisation(self, bot_id: int, fields: Dict) -> Dict:
        """
        Create or update a bot's customisation.

        Args:
            bot_id (int)
            fields (dict): validated subset of CUSTOMISATION_FIELDS

        Returns:
            dict: the full customisation after the save
        """

        bot = self.bot_service.get_bot(bot_id)

        try:
            customisation = bot.customisation
            if customisation is None:
                customisation = BotCustomisation(bot_id = bot.bot_id)
                db.session.add(customisation)

            for name, value in fields.items():
                setattr(customisation, name, value)

            db.session.commit()

        except SQLAlchemyError as error:
            db.session.rollback()
            raise ServiceException(
                error_code = "CUSTOMISATION_SAVE_FAILED",
                message = messages.ERROR["CUSTOMISATION_SAVE_FAILED"],
                details = str(error),
                status_code = 500
            )

        logger.info("Customisation saved", bot_id = bot_id, fields = sorted(fields))
        return customisation_to_dict(customisation)
