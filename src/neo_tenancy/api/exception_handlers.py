"""
Exception handlers for FastAPI applications embedding neo-tenancy.

Maps ``NeoTenancyError`` subclasses to HTTP responses through
``HTTP_STATUS_MAP`` and ``create_error_response``.
"""
from typing import Any, Callable, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
import logging

from ..core.exceptions import NeoTenancyError, create_error_response, get_http_status_code

logger = logging.getLogger(__name__)

ResponseFormatter = Callable[[NeoTenancyError], Dict[str, Any]]


class ExceptionHandlerRegistry:
    """Registry for the neo-tenancy exception handlers."""
    
    def __init__(
        self,
        response_formatter: Optional[ResponseFormatter] = None,
        is_production: bool = True
    ):
        """
        Initialize exception handler registry.
        
        Args:
            response_formatter: Function turning an error into a response body
            is_production: Hide unexpected error messages from clients
        """
        self.response_formatter = response_formatter or create_error_response
        self.is_production = is_production
    
    def _error_body(self, code: str, message: str, error_type: str) -> Dict[str, Any]:
        return {
            "error": {
                "code": code,
                "message": message,
                "details": {},
                "type": error_type,
            }
        }
    
    def register_handlers(self, app: FastAPI) -> None:
        """Register exception handlers for the application.
        
        Args:
            app: FastAPI application instance
        """
        @app.exception_handler(NeoTenancyError)
        async def tenancy_exception_handler(request: Request, exc: NeoTenancyError):
            """Handle directory and authorization sync errors."""
            status_code = get_http_status_code(exc)
            if status_code >= 500:
                logger.error(f"{exc.error_code} on {request.method} {request.url.path}: {exc.message}")
            else:
                logger.debug(f"{exc.error_code} on {request.method} {request.url.path}: {exc.message}")
            return JSONResponse(status_code=status_code, content=self.response_formatter(exc))
        
        @app.exception_handler(ValueError)
        async def value_error_handler(request: Request, exc: ValueError):
            """Handle value errors."""
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content=self._error_body("INVALID_ARGUMENT", str(exc), "ValueError"),
            )
        
        @app.exception_handler(Exception)
        async def general_exception_handler(request: Request, exc: Exception):
            """Handle unexpected exceptions."""
            logger.error(f"Unhandled exception: {exc}", exc_info=True)
            
            if self.is_production:
                message = "An unexpected error occurred"
            else:
                message = str(exc)
            
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=self._error_body("INTERNAL_ERROR", message, type(exc).__name__),
            )


def register_exception_handlers(
    app: FastAPI,
    response_formatter: Optional[ResponseFormatter] = None,
    is_production: bool = True
) -> None:
    """
    Register exception handlers for a FastAPI application.
    
    Args:
        app: FastAPI application instance
        response_formatter: Custom response formatter function
        is_production: Whether running in production mode
    """
    registry = ExceptionHandlerRegistry(response_formatter, is_production)
    registry.register_handlers(app)
