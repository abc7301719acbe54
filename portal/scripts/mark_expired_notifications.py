"""Periodic sweep: expire new_job notifications whose job is deleted or past its deadline."""
import logging
import sys

from portal.config import Config
from portal.database import get_database
from portal.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


def main() -> int:
    logging.basicConfig(level=Config.LOG_LEVEL)
    try:
        # the sweep never sends mail
        service = NotificationService(get_database(), dispatcher=None)
        service.mark_expired_notifications()
    except Exception as e:
        logger.error(f"Error updating notifications: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
