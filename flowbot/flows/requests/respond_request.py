"""
Respond Request

Handles:
    - Swagger body model for Respond API
    - Extract JSON payload
"""

from flask_restx import fields
from flask import request





class RespondRequest:

    @staticmethod
    def apply(namespace):
        """
        Swagger Model for Respond
        """

        model = namespace.model("RespondRequest", {
            "input": fields.Raw(
                required = False,
                description = "Answer for a question / confirmation node",
                example = "Alice"
            ),
            "option_index_or_label": fields.Raw(
                required = False,
                description = "Branch choice: option index or option label",
                example = 0
            )
        })

        return namespace.expect(model)


    @staticmethod
    def get_data():
        """
        Extract JSON body; a missing body counts as empty
        """
        return request.get_json(silent = True) or {}
