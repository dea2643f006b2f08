#!/usr/bin/env python3
"""
Main entry point for the Rule Validation Service.

Run this script to start the HTTP API.
"""

import uvicorn

from src.config.settings import get_settings


def main():
    settings = get_settings()
    uvicorn.run(
        "src.api.main:app",
        host=settings.api.host,
        port=settings.api.port,
        log_level=settings.logging.level.lower(),
    )


if __name__ == "__main__":
    main()
