"""WSGI entry point."""

from .app import create_app

app = create_app()


if __name__ == "__main__":
    port = int(app.config.get("APP_PORT", 5000))
    app.run(host="0.0.0.0", port=port)
