import logging
import os
from typing import Optional


def configure_logging(level: Optional[str] = None) -> None:
    """Configure logging for the API process and the management CLI."""
    resolved = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=resolved,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    # Access lines stay at WARNING or above.
    logging.getLogger("uvicorn.access").setLevel(max(logging.getLevelName(resolved), logging.WARNING))
