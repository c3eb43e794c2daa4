"""
File: Bot Routes

Handles:
    - Add Bot / List Bots
    - Get Bot / Delete Bot
    - Update Conversation Flow
    - Chat Histories
    - Widget Customisation
"""

# Python Packages
import structlog
from flask import request
from flask_restx import Namespace, Resource

# Requests
from .requests.add_bot_request import AddBotRequest
from .requests.update_flow_request import UpdateFlowRequest
from .requests.save_customisation_request import SaveCustomisationRequest

# Validations
from .validations.bot_validation import BotValidation

# Controller
from .controller import BotController

# Errors & Exceptions
from ..util import messages
from ..util.exceptions import AppException, InternalServerException

# Namespaces
bots_namespace = Namespace('bots', description = 'Bot and Conversation Flow APIs')

logger = structlog.get_logger(__name__)





@bots_namespace.route('/')
class Bots(Resource):

    @AddBotRequest.apply(bots_namespace)
    def post(self):
        """
        Create new Bot, optionally with its Conversation Flow
        """

        try:
            # Args
            args = AddBotRequest.get_data()

            # Validations
            BotValidation.validate_body(args)
            args = BotValidation().validate_create(args)

            # Controller
            result = BotController().create_bot(args)

            return {
                "status": "success",
                "message": messages.SUCCESS["BOT_CREATE_SUCCESS"],
                "data": result
            }, 201

        except AppException as error:
            return error.to_dict(), error.status_code

        except Exception as error:
            logger.exception("Create bot failed")
            error = InternalServerException(details = str(error))
            return error.to_dict(), error.status_code


    @bots_namespace.doc(params = {"user_id": "Only bots of this owner"})
    def get(self):
        """
        List Bots, newest first
        """

        try:
            user_id = request.args.get("user_id")
            result = BotController().list_bots(user_id)

            return {
                "status": "success",
                "data": result
            }, 200

        except AppException as error:
            return error.to_dict(), error.status_code

        except Exception as error:
            logger.exception("List bots failed")
            error = InternalServerException(details = str(error))
            return error.to_dict(), error.status_code



@bots_namespace.route('/<int:bot_id>')
class Bot(Resource):

    def get(self, bot_id):
        """
        Get Bot with its Conversation Flow
        """

        try:
            result = BotController().get_bot(bot_id)

            return {
                "status": "success",
                "data": result
            }, 200

        except AppException as error:
            return error.to_dict(), error.status_code

        except Exception as error:
            error = InternalServerException(details = str(error))
            return error.to_dict(), error.status_code


    @bots_namespace.doc(params = {"user_id": "Owner; when given the bot must belong to it"})
    def delete(self, bot_id):
        """
        Delete Bot with its Flow Sessions and Customisation
        """

        try:
            user_id = request.args.get("user_id")
            result = BotController().delete_bot(bot_id, user_id)

            return {
                "status": "success",
                "message": messages.SUCCESS["BOT_DELETE_SUCCESS"],
                "data": result
            }, 200

        except AppException as error:
            return error.to_dict(), error.status_code

        except Exception as error:
            logger.exception("Delete bot failed", bot_id = bot_id)
            error = InternalServerException(details = str(error))
            return error.to_dict(), error.status_code



@bots_namespace.route('/<int:bot_id>/flow')
class UpdateFlow(Resource):

    @UpdateFlowRequest.apply(bots_namespace)
    def put(self, bot_id):
        """
        Replace the Conversation Flow of a Bot

        - Validate nodes / edges
        - Store the new flow
        - Sessions in flight continue on the new flow
        """

        try:
            # Args
            args = UpdateFlowRequest.get_data()

            # Validations
            BotValidation.validate_body(args)
            conversation_flow = BotValidation().validate_flow(args.get("conversation_flow"))

            # Controller
            result = BotController().update_flow(bot_id, conversation_flow)

            return {
                "status": "success",
                "message": messages.SUCCESS["BOT_FLOW_UPDATE_SUCCESS"],
                "data": result
            }, 200

        except AppException as error:
            return error.to_dict(), error.status_code

        except Exception as error:
            logger.exception("Update flow failed", bot_id = bot_id)
            error = InternalServerException(details = str(error))
            return error.to_dict(), error.status_code



@bots_namespace.route('/<int:bot_id>/histories')
class ChatHistories(Resource):

    def get(self, bot_id):
        """
        All chat histories (flow sessions) of a Bot, newest first
        """

        try:
            result = BotController().get_all_chat_histories(bot_id)

            return {
                "status": "success",
                "data": result
            }, 200

        except AppException as error:
            return error.to_dict(), error.status_code

        except Exception as error:
            error = InternalServerException(details = str(error))
            return error.to_dict(), error.status_code



@bots_namespace.route('/<int:bot_id>/histories/<session_id>')
class ChatHistoryBySession(Resource):

    def get(self, bot_id, session_id):
        """
        One chat history, with answered prompts that only restate the
        user's input removed
        """

        try:
            result = BotController().get_chat_history(bot_id, session_id)

            return {
                "status": "success",
                "data": result
            }, 200

        except AppException as error:
            return error.to_dict(), error.status_code

        except Exception as error:
            error = InternalServerException(details = str(error))
            return error.to_dict(), error.status_code



@bots_namespace.route('/<int:bot_id>/customisation')
class Customisation(Resource):

    def get(self, bot_id):
        """
        Chat widget customisation of a Bot (null when never saved)
        """

        try:
            result = BotController().get_customisation(bot_id)

            return {
                "status": "success",
                "data": result
            }, 200

        except AppException as error:
            return error.to_dict(), error.status_code

        except Exception as error:
            error = InternalServerException(details = str(error))
            return error.to_dict(), error.status_code


    @SaveCustomisationRequest.apply(bots_namespace)
    def put(self, bot_id):
        """
        Save chat widget customisation

        - Created on first save
        - Only the fields sent are changed
        """

        try:
            # Args
            args = SaveCustomisationRequest.get_data()

            # Validations
            BotValidation.validate_body(args)
            fields = BotValidation().validate_customisation(args)

            # Controller
            result = BotController().save_customisation(bot_id, fields)

            return {
                "status": "success",
                "message": messages.SUCCESS["CUSTOMISATION_SAVE_SUCCESS"],
                "data": result
            }, 200

        except AppException as error:
            return error.to_dict(), error.status_code

        except Exception as error:
            logger.exception("Save customisation failed", bot_id = bot_id)
            error = InternalServerException(details = str(error))
            return error.to_dict(), error.status_code
