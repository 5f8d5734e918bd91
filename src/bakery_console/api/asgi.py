"""ASGI entrypoint for the bakery console API."""

from bakery_console.api.app import create_app
from bakery_console.containers import build_container

app = create_app(build_container())
