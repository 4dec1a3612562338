"""
Pulse Controller - Main entry point.
"""

import logging
import sys

from controller.src.config import get_settings
from controller.src.worker import run_worker

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)]
)

logger = logging.getLogger(__name__)

def main():
    """Main entry point."""
    logger.info("Starting Pulse Controller")
    logger.info(f"Redis URL: {settings.redis_url}")
    logger.info(f"Step timeout: {settings.step_timeout or 'none'}")

    if settings.clone_repository:
        logger.info(f"Cloning repositories into {settings.workspace_root or 'the system temp dir'}")
    else:
        logger.info("Repository cloning disabled, steps run in the working directory")

    # Start worker
    logger.info("Starting worker...")
    run_worker()

if __name__ == "__main__":
    main()
