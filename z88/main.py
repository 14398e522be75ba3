"""
Z-88 Creative Engine - Main Entry Point
Serves the story API with uvicorn.
"""

import os

import uvicorn
from dotenv import load_dotenv

from .logging_config import setup_logging

# Load environment variables
load_dotenv()


def main() -> None:
    setup_logging()
    host = os.getenv("Z88_HOST", "0.0.0.0")
    port = int(os.getenv("Z88_PORT", "8001"))
    uvicorn.run("z88.server:app", host=host, port=port, log_config=None)


if __name__ == "__main__":
    main()
