from .sync_adapter import AuthorizationSyncAdapter

__all__ = ["AuthorizationSyncAdapter"]
