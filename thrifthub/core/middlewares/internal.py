import hmac
from typing import Optional
from fastapi import Header

from thrifthub.configuration.settings import Configuration
from thrifthub.core.exceptions.app_exception import AuthenticationException

configuration = Configuration()


def require_internal_key(x_api_key: Optional[str] = Header(None)):
    """Guards endpoints called by cron jobs and other backend services."""
    expected = configuration.internal_api_key
    if not expected or not x_api_key or not hmac.compare_digest(x_api_key, expected):
        raise AuthenticationException("Invalid API key")
