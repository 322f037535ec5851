from .responses import BulkItemErrorResponse, BulkOperationResponse

__all__ = ["BulkItemErrorResponse", "BulkOperationResponse"]
