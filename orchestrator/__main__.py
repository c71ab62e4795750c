"""Run the orchestrator API server."""

import uvicorn

from orchestrator.adapters.web.server import app
from orchestrator.config import CONFIG


def main():
    uvicorn.run(app, host="0.0.0.0", port=CONFIG["port"], log_level="info")


if __name__ == "__main__":
    main()
