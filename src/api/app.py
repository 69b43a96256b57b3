"""Application factory for the SEC filing resolver API."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from sec_filings import FilingContext, SecFilingsConfig

from .filings_router import router


logger = logging.getLogger(__name__)


def create_app(
    context: Optional[FilingContext] = None,
    config: Optional[SecFilingsConfig] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        context: Pre-built filing context, mainly for tests. When omitted the
            context is built from ``config`` on first use.
        config: Settings used to build the context lazily.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        filing_context = app.state.filing_context
        if filing_context is not None:
            logger.info("Closing filing context")
            await filing_context.aclose()
            app.state.filing_context = None

    app = FastAPI(
        title="SEC Filing Resolver API",
        version="0.1.0",
        description=(
            "Resolve a ticker, CIK, or company name to its latest 10-K or "
            "13F-HR filing and return the extracted sections or holdings."
        ),
        lifespan=lifespan,
    )
    app.state.filing_context = context
    app.state.filing_config = config
    app.include_router(router)
    return app


app = create_app()
