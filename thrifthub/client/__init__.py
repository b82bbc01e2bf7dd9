from thrifthub.client.api_client import ApiClient, ApiError
from thrifthub.client.notifications import Notification

__all__ = ["ApiClient", "ApiError", "Notification"]
