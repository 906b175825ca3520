from .api_client import ApiError, PosturePalClient
from .local_store import LocalStore, LocalStoreError
from .tracking import TrackingLoop

__all__ = ["ApiError", "PosturePalClient", "LocalStore", "LocalStoreError", "TrackingLoop"]
