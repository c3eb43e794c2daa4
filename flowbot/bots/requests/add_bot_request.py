"""
Add Bot Request

Handles:
    - Swagger body model for Add Bot API
    - Extract JSON payload
"""

from flask_restx import fields
from flask import request





class AddBotRequest:

    @staticmethod
    def apply(namespace):
        """
        Swagger Model for Add Bot
        """

        model = namespace.model("AddBotRequest", {
            "name": fields.String(
                required = True,
                description = "Bot name"
            ),
            "description": fields.String(
                required = False,
                description = "What the bot is for"
            ),
            "user_id": fields.String(
                required = False,
                description = "Owner of the bot"
            ),
            "conversation_flow": fields.Raw(
                required = False,
                description = "Flow definition {nodes, edges}, object or JSON string"
            )
        })

        return namespace.expect(model)


    @staticmethod
    def get_data():
        """
        Extract JSON body
        """
        return request.get_json(silent = True)
