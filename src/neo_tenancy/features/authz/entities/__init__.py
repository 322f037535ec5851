from .scope import Scope, Relation
from .protocols import AuthorizationClient
from .commands import SyncAction, SyncCommand

__all__ = ["Scope", "Relation", "AuthorizationClient", "SyncAction", "SyncCommand"]
