"""Application entry point for the converter API server."""

import uvicorn

from ocrdoc.api.app import app, config
from ocrdoc.utils.logger import setup_logging


def main() -> None:
    """Start the FastAPI application server on localhost."""
    setup_logging(config.log_level)
    uvicorn.run(app, host="127.0.0.1", port=8000)


if __name__ == "__main__":
    main()
