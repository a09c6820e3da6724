"""
Request-scoped dependencies shared by all endpoints.

The storage facade and the settings it was built from are created once
in ``create_app`` and kept on ``app.state``; these helpers hand them to
endpoints so nothing imports a module-level storage instance.
"""

from fastapi import Request

from ..core.config import Settings
from ..storage import Storage


def get_storage(request: Request) -> Storage:
    return request.app.state.storage


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
