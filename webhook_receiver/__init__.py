"""Diagnostic webhook receiver: accepts JSON at POST /webhook and logs it."""
from webhook_receiver.app import create_app
from webhook_receiver.config import ConfigError, Settings

__all__ = ["create_app", "ConfigError", "Settings"]
__version__ = "1.0.0"
