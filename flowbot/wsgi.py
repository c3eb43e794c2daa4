"""
WSGI entry point

    flask --app flowbot.wsgi run
    gunicorn flowbot.wsgi:app
"""

from .app import create_app


# Create app instance for Flask CLI / WSGI servers
app = create_app()


if __name__ == "__main__":
    app.run(host = "0.0.0.0", port = 5000)
