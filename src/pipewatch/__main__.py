"""Run the PipeWatch API server: ``python -m pipewatch``."""

import os

import uvicorn

from pipewatch.api import create_app
from pipewatch.logging import setup_logging


def main() -> None:
    """Configure logging and serve the API with uvicorn."""
    setup_logging()
    host = os.environ.get("PIPEWATCH_HOST", "127.0.0.1")
    port = int(os.environ.get("PIPEWATCH_PORT", "8420"))
    uvicorn.run(create_app(), host=host, port=port, log_config=None)


if __name__ == "__main__":
    main()
