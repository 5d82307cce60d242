"""
Todo API package.

Exposes the application factory at package level (`todo_api.create_app`).
"""

from .main import create_app  # noqa: F401

__version__ = "0.1.0"
