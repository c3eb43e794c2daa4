"""
Update Flow Request

Handles:
    - Swagger body model for Update Conversation Flow API
    - Extract JSON payload
"""

from flask_restx import fields
from flask import request





class UpdateFlowRequest:

    @staticmethod
    def apply(namespace):
        """
        Swagger Model for Update Conversation Flow
        """

        model = namespace.model("UpdateFlowRequest", {
            "conversation_flow": fields.Raw(
                required = True,
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
