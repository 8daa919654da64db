"""Main FastMCP server: mounts all sub-servers."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastmcp import FastMCP

from . import tracing
from .client import GeminiClient
from .config import get_config
from .tools.infra import infra_server
from .tools.project import project_server

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(server: FastMCP):
    """Startup/shutdown hook: tracing setup and shared Gemini client teardown."""
    tracing.setup()
    yield {}
    tracing.shutdown()
    closed = await GeminiClient.close_all()
    logger.info("Lifespan shutdown: closed %d client(s)", closed)


app = FastMCP(
    "script-documenter",
    instructions=(
        "Adds JSDoc-style documentation to uploaded scripts with Gemini. "
        "Upload files into the 'main' and 'frontend' groupings, run "
        "project_analyze, review with project_diff, then project_export."
    ),
    lifespan=_lifespan,
)

app.mount(project_server)
app.mount(infra_server)


def main() -> None:
    """Entry-point for ``script-documenter-mcp`` console script.

    Raises:
        ConfigurationError: If no Gemini API key is configured.
    """
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    get_config().require_api_key()
    app.run()


if __name__ == "__main__":
    main()
