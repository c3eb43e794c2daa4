"""
Flow validation for all flow endpoints.
"""

# Exceptions
from ...util.exceptions import ValidationException

# Messages
from ...util import messages


# JSON scalars accepted as an answer
ANSWER_TYPES = (str, int, float, bool)





class FlowValidation:

    @staticmethod
    def validate_body(data):
        if data is None or not isinstance(data, dict):
            raise ValidationException(
                error_code = "INVALID_REQUEST",
                message = messages.ERROR["INVALID_REQUEST"]
            )


    @staticmethod
    def validate_session_id(session_id):
        if not session_id or not isinstance(session_id, str) or not session_id.strip():
            raise ValidationException(
                error_code = "MISSING_SESSION_ID",
                message = "session_id is required."
            )


    @staticmethod
    def validate_input(user_input):
        """ Answers are JSON scalars; objects and lists are rejected... """

        if user_input is not None and not isinstance(user_input, ANSWER_TYPES):
            raise ValidationException(
                error_code = "INVALID_INPUT",
                message = "input must be a string, number or boolean."
            )


    @staticmethod
    def validate_option(option_index_or_label):
        if option_index_or_label is None:
            return

        if isinstance(option_index_or_label, bool) or not isinstance(option_index_or_label, (str, int)):
            raise ValidationException(
                error_code = "INVALID_OPTION",
                message = "option_index_or_label must be an option index or label."
            )
