from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from templatehub import __version__
from templatehub.config import get_config, save_config
from templatehub.logger import get_logger
from templatehub.routers import templates_api as templates_router
from templatehub.services.templates import TemplateDiscoveryService

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifespan events."""
    config = get_config()
    config.paths.data_dir.mkdir(parents=True, exist_ok=True)
    config.paths.cache_dir.mkdir(parents=True, exist_ok=True)

    service = TemplateDiscoveryService.from_config(config)
    app.state.discovery = service
    logger.info("Template service started", data_dir=str(config.paths.data_dir), api_url=config.github.api_url)
    try:
        yield
    finally:
        await service.client.cache.aclose()
        logger.info("Template service stopped")


app = FastAPI(title="templatehub", version=__version__, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/api/hello")
async def hello_get() -> dict[str, str]:
    """Return a simple hello message with version info."""
    return {"message": "Hello from templatehub!", "version": __version__}


app.include_router(templates_router.router)


def run_server(port: int | None = None) -> None:
    """Run the templatehub server.

    Args:
        port: Optional port number to override config. If provided, will be saved to config.
    """
    config = get_config()

    if port is not None and port != config.server.port:
        logger.info("Port override detected, updating config", old_port=config.server.port, new_port=port)
        config.server.port = port
        save_config(config)

    uvicorn.run(app, host=config.server.host, port=config.server.port)


def main() -> None:
    """Main entry point with CLI argument parsing."""
    import argparse

    parser = argparse.ArgumentParser(
        description="templatehub - discover and install project templates from GitHub",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  templatehub                  # Start with default/saved port
  templatehub --port 9000      # Start on port 9000 and save it
        """,
    )

    parser.add_argument(
        "--port",
        type=int,
        metavar="PORT",
        help="Port number to run the server on (will be saved to config)",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"templatehub {__version__}",
    )

    args = parser.parse_args()

    run_server(port=args.port)


if __name__ == "__main__":
    main()
