"""Main entry point for the lobby events server."""

import os
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from lobby_events.api import create_fastapi_app
from lobby_events.logging_config import setup_logging
from sim import Sim


def main():
    """Run the application."""
    project_root = Path(__file__).resolve().parent.parent
    load_dotenv(project_root / ".env")
    setup_logging()

    api_host = os.getenv("API_HOST", "localhost")
    api_port = int(os.getenv("API_PORT", "8000"))
    api_url = f"http://{api_host}:{api_port}"

    # SIM publishes to this server's own ingress
    sim = Sim(api_url=api_url, tick_interval=float(os.getenv("SIM_TICK_SECONDS", "1.0")))

    from lobby_events.api.routes import control
    control.set_sim_instance(sim)

    app = create_fastapi_app()

    uvicorn.run(
        app,
        host=api_host,
        port=api_port,
        log_level="info",
    )


if __name__ == "__main__":
    main()
