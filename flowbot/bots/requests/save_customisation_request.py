"""
Save Customisation Request

Handles:
    - Swagger body model for Save Customisation API
    - Extract JSON payload
"""

from flask_restx import fields
from flask import request





class SaveCustomisationRequest:

    @staticmethod
    def apply(namespace):
        """
        Swagger Model for Save Customisation
        """

        model = namespace.model("SaveCustomisationRequest", {
            "header_title": fields.String(description = "Chat window title"),
            "header_subtitle": fields.String(description = "Line under the title"),
            "placeholder": fields.String(description = "Input placeholder text"),
            "primary_color": fields.String(example = "#9b5de5"),
            "background_color": fields.String(),
            "header_background": fields.String(),
            "user_message_color": fields.String(),
            "bot_message_color": fields.String(),
            "message_background_color": fields.String(),
            "text_color": fields.String(),
            "font_family": fields.String(),
            "border_radius": fields.Integer(),
            "chat_custom_css": fields.String(description = "Extra CSS for the chat window"),
            "use_chat_custom_css": fields.Boolean(),
            "button_background": fields.String(),
            "button_color": fields.String(),
            "button_size": fields.String(example = "56"),
            "button_border_radius": fields.String(example = "50"),
            "button_position": fields.String(enum = ["bottom-right", "bottom-left"]),
            "button_bottom": fields.String(example = "20"),
            "button_right": fields.String(example = "20"),
            "button_left": fields.String(example = "20"),
            "button_custom_css": fields.String(description = "Extra CSS for the launcher button"),
            "use_button_custom_css": fields.Boolean()
        })

        return namespace.expect(model)


    @staticmethod
    def get_data():
        """
        Extract JSON body
        """
        return request.get_json(silent = True)
