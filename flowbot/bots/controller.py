"""
Bot Controller

Handles:
    - Orchestration between handler and service layer
"""

# Services
from .services.bot_service import BotService, bot_to_dict
from .services.customisation_service import CustomisationService





class BotController:

    def __init__(self):
        """ Initialize controller with service instances... """

        self.bot_service = BotService()
        self.customisation_service = CustomisationService()


    def create_bot(self, args: dict) -> dict:
        """
        Create a bot

        Args:
            args (dict):
                {
                    "name": str,
                    "description": str,
                    "user_id": str,
                    "conversation_flow": dict
                }

        Returns:
            dict
        """

        return self.bot_service.create_bot(args)



    def get_bot(self, bot_id: int) -> dict:
        return bot_to_dict(self.bot_service.get_bot(bot_id))



    def update_flow(self, bot_id: int, conversation_flow: dict) -> dict:
        """
        Replace the conversation flow of a bot

        Args:
            bot_id (int)
            conversation_flow (dict): validated {nodes, edges}

        Returns:
            dict
        """

        return self.bot_service.update_flow(bot_id, conversation_flow)



    def get_all_chat_histories(self, bot_id: int) -> dict:
        return self.bot_service.get_all_chat_histories(bot_id)



    def get_chat_history(self, bot_id: int, session_id: str) -> dict:
        return self.bot_service.get_chat_history_by_session(bot_id, session_id)



    def list_bots(self, user_id: str = None) -> dict:
        return self.bot_service.list_bots(user_id)



    def delete_bot(self, bot_id: int, user_id: str = None) -> dict:
        """
        Delete a bot with its sessions and customisation

        Returns:
            dict
        """

        self.bot_service.delete_bot(bot_id, user_id)
        return {"bot_id": bot_id, "deleted": True}



    def get_customisation(self, bot_id: int) -> dict:
        return self.customisation_service.get_customisation(bot_id)



    def save_customisation(self, bot_id: int, fields: dict) -> dict:
        return self.customisation_service.save_customisation(bot_id, fields)
