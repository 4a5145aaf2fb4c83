# core/logger.py
import logging
from app.core.config import settings

# Create logger
logger = logging.getLogger("tripbook")
logger.setLevel(settings.LOG_LEVEL.upper())

# Console Handler
console_handler = logging.StreamHandler()
formatter = logging.Formatter("[%(asctime)s] [%(levelname)s] %(message)s")
console_handler.setFormatter(formatter)

# Add handler once, even if the module is reloaded
if not logger.handlers:
    logger.addHandler(console_handler)
