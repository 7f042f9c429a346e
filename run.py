"""Entry point for running the shift planning API."""

from shiftplan_web import create_app

app = create_app()

if __name__ == "__main__":
    app.run()
