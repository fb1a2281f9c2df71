"""ASGI entrypoint for the adherence tracker API."""

from adherence_tracker.api.app import create_app
from adherence_tracker.containers import build_container

app = create_app(build_container())
