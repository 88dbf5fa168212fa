from __future__ import annotations

from app.api.routes.health import router as health_router
from app.api.routes.submissions import router as submissions_router

__all__ = ["health_router", "submissions_router"]
