# app/api/__init__.py
# This file makes the api directory a Python package.

from . import admin
from . import auth
from . import ban
from . import notification
from . import report
from . import unban_request
from . import ws

__all__ = [
    "auth",
    "ban",
    "report",
    "unban_request",
    "admin",
    "notification",
    "ws",
]
