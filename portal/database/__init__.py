import logging

from portal.config import Config

logger = logging.getLogger(__name__)


def get_database():
    """MongoDB when configured, otherwise the JSON-file LocalStorage under DATA_DIR."""
    if Config.USE_LOCAL_DB:
        from portal.database.local_storage import LocalStorage
        logger.info(f"Using local JSON storage in {Config.DATA_DIR}")
        return LocalStorage(Config.DATA_DIR)
    from portal.database.mongodb import MongoDB
    return MongoDB()
