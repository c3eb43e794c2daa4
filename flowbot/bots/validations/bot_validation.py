"""
Bot Validation

Checks:
    - request body is present
    - bot name is provided, minimum length
    - conversation_flow is a well-formed flow definition
    - widget customisation fields have the right types
"""

# Python Packages
import json

# App Messages
from ...util import messages

# Exceptions
from ...util.exceptions import ValidationException

# Model Constants
from ...models.bot_customisation import BUTTON_POSITIONS, CUSTOM_CSS_MAX_LENGTH


BOT_NAME_MIN_LENGTH = 3

# Customisation fields by kind
OPTIONAL_TEXT_FIELDS = (
    "header_title", "header_subtitle", "placeholder", "primary_color",
    "background_color", "header_background", "user_message_color",
    "bot_message_color", "message_background_color", "text_color", "font_family",
)
REQUIRED_TEXT_FIELDS = (
    "button_background", "button_color", "button_size", "button_border_radius",
    "button_bottom", "button_right", "button_left",
)
CSS_FIELDS = ("chat_custom_css", "button_custom_css")
FLAG_FIELDS = ("use_chat_custom_css", "use_button_custom_css")





class BotValidation:

    @staticmethod
    def validate_body(data):
        if not data or not isinstance(data, dict):
            raise ValidationException(
                error_code = "INVALID_REQUEST",
                message = messages.ERROR["INVALID_REQUEST"]
            )


    def validate_create(self, args: dict) -> dict:
        """
        Validate create arguments, returning them with the flow normalised.
        """

        name = args.get("name")

        # -----------------------------------------
        # 🔹 Bot Name Validation
        # -----------------------------------------

        if not name or not isinstance(name, str) or not name.strip():
            raise ValidationException(
                message = messages.ERROR["BOT_NAME_REQUIRED"]
            )

        if len(name.strip()) < BOT_NAME_MIN_LENGTH:
            raise ValidationException(
                message = messages.ERROR["BOT_NAME_MIN"].format(BOT_NAME_MIN_LENGTH)
            )

        # -----------------------------------------
        # 🔹 Flow Validation (optional on create)
        # -----------------------------------------

        flow = args.get("conversation_flow")
        if flow is not None:
            args = dict(args, conversation_flow = self.validate_flow(flow))

        return args


    def validate_flow(self, flow) -> dict:
        """
        A flow is {"nodes": [...], "edges": [...]}, or the same as a JSON string.

        Every node needs an id (unique within the flow); every edge needs a
        source and a target. Node types are not checked here: unknown types
        are allowed and end the flow when reached.
        """

        if isinstance(flow, str):
            try:
                flow = json.loads(flow)
            except ValueError:
                raise ValidationException(
                    error_code = "INVALID_FLOW",
                    message = messages.ERROR["INVALID_FLOW_JSON"]
                )

        if (
            not isinstance(flow, dict)
            or not isinstance(flow.get("nodes"), list)
            or not isinstance(flow.get("edges"), list)
        ):
            raise ValidationException(
                error_code = "INVALID_FLOW",
                message = messages.ERROR["INVALID_FLOW"]
            )

        seen = set()
        for node in flow["nodes"]:
            if not isinstance(node, dict) or node.get("id") in (None, ""):
                raise ValidationException(
                    error_code = "INVALID_FLOW",
                    message = messages.ERROR["FLOW_NODE_ID_REQUIRED"]
                )

            node_id = str(node["id"])
            if node_id in seen:
                raise ValidationException(
                    error_code = "INVALID_FLOW",
                    message = messages.ERROR["FLOW_DUPLICATE_NODE_ID"].format(node_id)
                )
            seen.add(node_id)

        for edge in flow["edges"]:
            if (
                not isinstance(edge, dict)
                or edge.get("source") in (None, "")
                or edge.get("target") in (None, "")
            ):
                raise ValidationException(
                    error_code = "INVALID_FLOW",
                    message = messages.ERROR["FLOW_EDGE_INCOMPLETE"]
                )

        return {"nodes": flow["nodes"], "edges": flow["edges"]}


    def validate_customisation(self, args: dict) -> dict:
        """
        Widget styling fields of the request, type-checked.

        Keys that are not customisation fields are dropped.
        """

        fields = {}

        for name, value in args.items():
            if name in OPTIONAL_TEXT_FIELDS:
                if value is not None and not isinstance(value, str):
                    self._invalid_field(name, "expected a string")

            elif name in REQUIRED_TEXT_FIELDS:
                if not isinstance(value, str):
                    self._invalid_field(name, "expected a string")

            elif name in CSS_FIELDS:
                if not isinstance(value, str):
                    self._invalid_field(name, "expected a string")
                if len(value) > CUSTOM_CSS_MAX_LENGTH:
                    self._invalid_field(name, f"at most {CUSTOM_CSS_MAX_LENGTH} characters")

            elif name in FLAG_FIELDS:
                if not isinstance(value, bool):
                    self._invalid_field(name, "expected true or false")

            elif name == "border_radius":
                if value is not None and (isinstance(value, bool) or not isinstance(value, int)):
                    self._invalid_field(name, "expected an integer")

            elif name == "button_position":
                if value not in BUTTON_POSITIONS:
                    self._invalid_field(name, "expected one of " + ", ".join(BUTTON_POSITIONS))

            else:
                continue

            fields[name] = value

        return fields


    @staticmethod
    def _invalid_field(name: str, reason: str):
        raise ValidationException(
            error_code = "INVALID_CUSTOMISATION",
            message = messages.ERROR["CUSTOMISATION_INVALID_FIELD"].format(name, reason)
        )
