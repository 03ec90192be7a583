"""ASGI entrypoint for the shoot workflow API."""

from shoot_workflow.api.app import create_app
from shoot_workflow.containers import build_container

app = create_app(build_container())
