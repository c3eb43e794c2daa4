"""
Model: BotCustomisation
Table: bot_customisations

Look of a bot's embeddable chat widget: the chat window and the launcher
button. At most one row per bot; removed together with the bot.
"""

# Python Packages
from sqlalchemy import func

# Database
from ..config.database import db


# Launcher button placements
BUTTON_POSITIONS = ("bottom-right", "bottom-left")

# Upper bound for the custom CSS blocks
CUSTOM_CSS_MAX_LENGTH = 50000





class BotCustomisation(db.Model):
    """ Widget styling of a chatbot... """

    # Table Name
    __tablename__ = "bot_customisations"

    customisation_id = db.Column(db.Integer, primary_key = True, autoincrement = True)

    bot_id = db.Column(
        db.Integer,
        db.ForeignKey("chat_bots.bot_id", ondelete = "CASCADE"),
        nullable = False,
        unique = True,
        index = True
    )

    # ── Chat window ───────────────────────────────────────────────────────────
    header_title = db.Column(db.String(255), nullable = True)
    header_subtitle = db.Column(db.String(255), nullable = True)
    placeholder = db.Column(db.String(255), nullable = True)
    primary_color = db.Column(db.String(64), nullable = True)
    background_color = db.Column(db.String(64), nullable = True)
    header_background = db.Column(db.String(255), nullable = True)
    user_message_color = db.Column(db.String(64), nullable = True)
    bot_message_color = db.Column(db.String(64), nullable = True)
    message_background_color = db.Column(db.String(64), nullable = True)
    text_color = db.Column(db.String(64), nullable = True)
    font_family = db.Column(db.String(255), nullable = True)
    border_radius = db.Column(db.Integer, nullable = True)
    chat_custom_css = db.Column(db.Text, nullable = False, default = "")
    use_chat_custom_css = db.Column(db.Boolean, nullable = False, default = False)

    # ── Launcher button ───────────────────────────────────────────────────────
    button_background = db.Column(
        db.String(255),
        nullable = False,
        default = "linear-gradient(135deg, #9b5de5, #f15bb5)"
    )
    button_color = db.Column(db.String(64), nullable = False, default = "#ffffff")
    button_size = db.Column(db.String(16), nullable = False, default = "56")
    button_border_radius = db.Column(db.String(16), nullable = False, default = "50")
    button_position = db.Column(db.String(16), nullable = False, default = BUTTON_POSITIONS[0])
    button_bottom = db.Column(db.String(16), nullable = False, default = "20")
    button_right = db.Column(db.String(16), nullable = False, default = "20")
    button_left = db.Column(db.String(16), nullable = False, default = "20")
    button_custom_css = db.Column(db.Text, nullable = False, default = "")
    use_button_custom_css = db.Column(db.Boolean, nullable = False, default = False)

    created_at = db.Column(
        db.DateTime(timezone = True),
        nullable = False,
        server_default = func.now()
    )

    updated_at = db.Column(
        db.DateTime(timezone = True),
        nullable = False,
        server_default = func.now(),
        onupdate = func.now()
    )

    # Relationship
    bot = db.relationship(
        "ChatBot",
        backref = db.backref("customisation", uselist = False, cascade = "all, delete")
    )

    def __repr__(self):
        return f"<BotCustomisation bot={self.bot_id}>"
