"""ASGI entrypoint for the grocery tracker API."""

from grocery_tracker.api.app import create_app
from grocery_tracker.containers import build_container

app = create_app(build_container())
