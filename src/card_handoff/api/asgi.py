"""ASGI entrypoint for the card hand-off API."""

from card_handoff.api.app import create_app
from card_handoff.containers import build_container

app = create_app(build_container())
