"""Entry point for hosts embedding the court engine."""

import structlog

from courts.service import CourtService
from courts.settings import CourtsSettings
from shared.logging import setup_logging

logger = structlog.get_logger()


def create_service(settings: CourtsSettings | None = None) -> CourtService:
    """Configure logging and build a CourtService rehydrated from the configured state file."""
    if settings is None:  # pragma: no cover
        settings = CourtsSettings()

    log_file = setup_logging(log_dir=settings.log_dir)
    if log_file is not None:
        logger.info("logging to file", path=str(log_file))

    return CourtService.from_settings(settings)
