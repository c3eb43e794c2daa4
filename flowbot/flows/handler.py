"""
Flow Handler
API endpoints for running conversation flows.
"""

# Python Packages
import structlog
from flask_restx import Namespace, Resource

# Request
from .requests.respond_request import RespondRequest

# Validations
from .validations.flow_validation import FlowValidation

# Controller
from .controller import FlowController

# Exceptions
from ..util.exceptions import AppException, InternalServerException

# Namespace
flow_namespace = Namespace("flow", description = "Conversation flow sessions")

logger = structlog.get_logger(__name__)





# ── POST /flow/start/<bot_id> ─────────────────────────────────────────────────
@flow_namespace.route("/start/<int:bot_id>")
class StartFlow(Resource):
    """ Start a new session for a bot... """

    def post(self, bot_id):
        """
        Start a conversation flow.

        Runs from the start node (id "1", else the first node) until the flow
        needs input or ends.

        Response:
        {
            "status": "success",
            "data": {
                "session_id": "abc-xyz",
                "messages": [
                    {"type": "message", "content": "Welcome!", "node_id": "1", "awaiting_input": false},
                    {"type": "question", "content": "Your name?", "node_id": "2",
                     "options": [], "variable": "name", "awaiting_input": true}
                ],
                "awaiting_input": {"type": "question", "node_id": "2", "variable": "name", "options": null},
                "finished": false,
                "variables": {}
            }
        }
        """

        try:
            logger.info("Starting flow", bot_id = bot_id)

            result = FlowController().start_flow(bot_id)

            return {"status": "success", "data": result}, 200

        except AppException as error:
            return error.to_dict(), error.status_code

        except Exception as error:
            logger.exception("Start flow failed", bot_id = bot_id)
            error = InternalServerException(details = str(error))
            return error.to_dict(), error.status_code



# ── POST /flow/session/<session_id>/respond ───────────────────────────────────
@flow_namespace.route("/session/<session_id>/respond")
class RespondToFlow(Resource):
    """ Respond to a session waiting for input... """

    @RespondRequest.apply(flow_namespace)
    def post(self, session_id):
        """
        Respond to a flow session with user input or a branch selection.

        Request:
        {
            "input": "Alice",                // question / confirmation answer
            "option_index_or_label": 0       // branch choice (index or label)
        }

        Response: same shape as /flow/start. A finished session answers with
        no messages and "finished": true.

        Errors:
          400 INPUT_REQUIRED : question / confirmation without input
          400 BRANCH_SELECTION_REQUIRED : branch without a choice
          400 BRANCH_OPTION_NOT_RECOGNIZED : choice matches no option
          404 SESSION_NOT_FOUND
          409 SESSION_CONFLICT : session changed concurrently; retry
        """

        try:
            args = RespondRequest.get_data()

            FlowValidation.validate_body(args)
            FlowValidation.validate_session_id(session_id)
            FlowValidation.validate_input(args.get("input"))
            FlowValidation.validate_option(args.get("option_index_or_label"))

            logger.info("Responding to flow", session_id = session_id)

            result = FlowController().respond(session_id.strip(), args)

            return {"status": "success", "data": result}, 200

        except AppException as error:
            return error.to_dict(), error.status_code

        except Exception as error:
            logger.exception("Respond failed", session_id = session_id)
            error = InternalServerException(details = str(error))
            return error.to_dict(), error.status_code
