"""
vaultroll.api.__main__ — Entry point for ``python -m vaultroll.api``
=====================================================================

Wiring:
1. Load .env (``DATABASE_URL``, ``VAULTROLL_CONFIG``).
2. Load config.yaml (game + settlement tuning).
3. Hand the app to uvicorn; the app's lifespan creates tables and seeds
   the jackpot pool.
"""

from __future__ import annotations

import logging

import uvicorn
from dotenv import load_dotenv

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("vaultroll")


def main() -> None:
    """Bootstrap and serve the Vaultroll API."""
    load_dotenv()

    from vaultroll.api.deps import get_config

    cfg = get_config()
    logger.info("Config loaded — strategy: %s", cfg.settlement_strategy)

    logger.info("Starting Vaultroll API on port %d…", cfg.api_port)
    uvicorn.run(
        "vaultroll.api.main:app",
        host="0.0.0.0",
        port=cfg.api_port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
