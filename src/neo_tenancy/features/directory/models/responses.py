"""Response models shared by the directory features."""

from typing import Any, Callable, List, Optional

from pydantic import BaseModel, Field

from ..entities.bulk import BulkResult


class BulkItemErrorResponse(BaseModel):
    identifier: str = Field(..., description="Input identifier of the failed item")
    code: str = Field(..., description="Error code, e.g. ALREADY_EXISTS")
    message: str = Field(..., description="Human-readable error message")


class BulkOperationResponse(BaseModel):
    """Partial-success result of a bulk operation."""
    
    success: List[Any] = Field(default_factory=list, description="Items that succeeded")
    errors: List[BulkItemErrorResponse] = Field(default_factory=list, description="Per-item failures")
    sync_failures: List[BulkItemErrorResponse] = Field(
        default_factory=list, description="Committed items whose authorization sync must be retried"
    )
    
    @classmethod
    def from_result(
        cls, result: BulkResult, item_converter: Optional[Callable[[Any], Any]] = None
    ) -> "BulkOperationResponse":
        convert = item_converter or (lambda item: item)
        return cls(
            success=[convert(item) for item in result.success],
            errors=[BulkItemErrorResponse(**error.to_dict()) for error in result.errors],
            sync_failures=[
                BulkItemErrorResponse(identifier=identifier, code=error.error_code, message=error.message)
                for identifier, error in result.sync_errors.items()
            ],
        )
