"""DealHub - multi-tenant discount marketplace core.

Cursor-paginated feeds, rotating refresh tokens and per-company
role checks for merchant mutations.
"""

__version__ = "0.1.0"

from dealhub.infrastructure.api.app import app

__all__ = ["app", "__version__"]
