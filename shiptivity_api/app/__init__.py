"""
Application package initializer.

The project is organised into a few logical pieces: ``core`` holds
configuration, logging and database access, ``services`` holds the
business logic (including the rank engine that keeps every swimlane
ordered), ``schemas`` holds the Pydantic payload models and ``api``
exposes the versioned HTTP routes.
"""

from .main import app  # noqa: F401
