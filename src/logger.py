import sys
import os
import logging
from dotenv import load_dotenv

from config.config import settings
from loguru import logger
from google.cloud import logging as g_logging
from google.cloud.logging.handlers import CloudLoggingHandler

load_dotenv()

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)

# chatty client libraries, only their warnings reach the dashboard log
QUIET_LOGGERS = ('google', 'urllib3', 'httpx', 'multipart')

class DashboardLogger():
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance.setup_logger()
        return cls._instance

    def setup_logger(self):
        logger.remove()

        level = (os.getenv('LOG_LEVEL') or 'INFO').upper()
        if os.getenv('DEPLOYMENT') == 'CLOUD':
            g_client = g_logging.Client(project=settings.GCP.PROJECT_ID)
            g_client.setup_logging(log_level=logging.WARNING)
            handler = CloudLoggingHandler(client=g_client, name=settings.General.LOG_NAME)
            logger.add(sink=handler, level=level, format="{message}")
        else:
            logger.add(sink=sys.stdout, level=level, format=CONSOLE_FORMAT, colorize=sys.stdout.isatty())

        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    def get_logger(self):
        return logger

logger = DashboardLogger().get_logger()
