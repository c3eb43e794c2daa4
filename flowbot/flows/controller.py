"""
Flow Controller
Orchestrates between handler and service layer.
"""

# Services
from .services.flow_service import FlowService





class FlowController:

    def __init__(self):
        """ Initialize services... """

        self.flow_service = FlowService()



    def start_flow(self, bot_id: int) -> dict:
        """
        Start a new conversation flow session for a bot.

        Args:
            bot_id: The bot whose flow should run.

        Returns:
            Dict with session_id, display messages, awaiting_input descriptor,
            finished flag and current variables.
        """

        return self.flow_service.start_flow(bot_id)



    def respond(self, session_id: str, args: dict) -> dict:
        """
        Respond to a session waiting for input or a branch selection.

        Args:
            session_id: The flow session identifier.
            args: {"input": any, "option_index_or_label": int | str}

        Returns:
            Same shape as start_flow.
        """

        return self.flow_service.respond(
            session_id            = session_id,
            user_input            = args.get("input"),
            option_index_or_label = args.get("option_index_or_label")
        )
