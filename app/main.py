"""
HTTP entry point for SpendWise.

Run with:
    uvicorn app.main:app
or:
    python -m app.main

Configuration comes from the environment (see spendwise.config).
JWT_SECRET must be set.
"""

import uvicorn

from spendwise.api import create_app
from spendwise.config import get_settings


app = create_app()


if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.app.debug_mode,
        log_level=settings.app.log_level.lower(),
    )
