"""Shared state for report runs."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .settings import AumSettings


@dataclass
class AppState:
    """Resolved settings and the application logger.

    Built once by the CLI. ``run_forever`` hands the same instance to every
    cycle, while clients and resolvers are rebuilt per cycle from it.
    """

    settings: AumSettings
    logger: logging.Logger
