from .ownership import OwnershipTransfer, transfer_ownership_in_transaction
from .organization_service import OrganizationService

__all__ = ["OwnershipTransfer", "transfer_ownership_in_transaction", "OrganizationService"]
