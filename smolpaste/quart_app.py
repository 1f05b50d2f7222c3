"""Typed Quart application class for smolpaste."""

from __future__ import annotations

from dishka import AsyncContainer
from quart import Quart


class SmolpasteApp(Quart):
    """Quart application with a guaranteed DI container attribute.

    ``container`` must be assigned by ``create_app`` immediately after
    construction; route code and lifecycle hooks may rely on it being set.
    """

    container: AsyncContainer
    """Dishka async container holding the process-wide state."""
