import os
import logging
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_PORT = 8080
DEFAULT_LOG_LEVEL = "INFO"


def parse_port(value):
    """Port number from the environment, default on a bad value"""
    if not value:
        return DEFAULT_PORT
    try:
        return int(value)
    except ValueError:
        logger.warning(f"⚠️ Invalid PORT {value!r}, using {DEFAULT_PORT}")
        return DEFAULT_PORT


def parse_log_level(value):
    """Logging level name from the environment, default on an unknown name"""
    if not value:
        return DEFAULT_LOG_LEVEL
    level = value.strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        logger.warning(f"⚠️ Invalid LOG_LEVEL {value!r}, using {DEFAULT_LOG_LEVEL}")
        return DEFAULT_LOG_LEVEL
    return level


# Server options (read once)
HOST = os.getenv("HOST", "0.0.0.0")
PORT = parse_port(os.getenv("PORT"))
LOG_LEVEL = parse_log_level(os.getenv("LOG_LEVEL"))


def get_verification_token():
    """Shared secret used as challenge hash input and HMAC key"""
    return os.getenv("VERIFICATION_TOKEN") or None


def get_endpoint_url():
    """Callback URL exactly as registered with eBay"""
    return os.getenv("ENDPOINT_URL") or None


def log_settings_status():
    """Log which secrets are configured, never their values"""
    token_status = "present" if get_verification_token() else "absent"
    url_status = "present" if get_endpoint_url() else "absent"
    logger.info(f"🔑 VERIFICATION_TOKEN: {token_status}")
    logger.info(f"🌐 ENDPOINT_URL: {url_status}")
