"""ASGI entrypoint for the wedding portal API."""

from wedding_portal.api.app import create_app
from wedding_portal.containers import build_container

app = create_app(build_container())
