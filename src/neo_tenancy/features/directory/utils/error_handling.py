"""Standardized error handling utilities for directory operations.

Decorators shared by the organization, member, team and invitation
services. Neither decorator swallows exceptions.
"""

import functools
import inspect
import logging
from typing import Any, Callable, Dict, Optional

from ....core.exceptions import AuthorizationSyncError, NeoTenancyError
from ....utils.timezone import utc_now

logger = logging.getLogger(__name__)

_CONTEXT_KEYS = ("actor_id", "organization_id", "team_id", "invitation_id", "user_id")


def _operation_context(func: Callable, args: tuple, kwargs: dict) -> Dict[str, Any]:
    """Pick well-known identifiers out of the call arguments."""
    try:
        bound = inspect.signature(func).bind_partial(*args, **kwargs)
    except TypeError:
        return {}
    return {key: bound.arguments[key] for key in _CONTEXT_KEYS if bound.arguments.get(key) is not None}


def directory_error_handler(
    operation_name: str,
    log_level: int = logging.ERROR,
    context_fields: Optional[Dict[str, str]] = None,
):
    """Decorator for standardized directory error handling.

    Domain errors are logged at INFO, authorization sync failures at
    WARNING and anything unexpected at ``log_level``. Every exception is
    re-raised.

    Usage:
        @directory_error_handler("create organization")
        async def create_organization(self, actor_id, name):
            ...
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> Any:
            operation_context = {"operation": operation_name, "function": func.__name__}
            if context_fields:
                operation_context.update(context_fields)
            operation_context.update(_operation_context(func, args, kwargs))

            try:
                return await func(*args, **kwargs)

            except AuthorizationSyncError as e:
                context_str = ", ".join(f"{k}={v}" for k, v in operation_context.items())
                logger.warning(f"Authorization sync pending retry after {operation_name}: {e} | Context: {context_str}")
                raise

            except NeoTenancyError as e:
                context_str = ", ".join(f"{k}={v}" for k, v in operation_context.items())
                logger.info(f"Domain exception in {operation_name}: {e} | Context: {context_str}")
                raise

            except Exception as e:
                context_str = ", ".join(f"{k}={v}" for k, v in operation_context.items())
                logger.log(log_level, f"Failed to {operation_name}: {e} | Context: {context_str}")
                raise

        return wrapper
    return decorator


def log_directory_operation(
    operation_name: str,
    log_level: int = logging.DEBUG,
    include_timing: bool = False,
    include_result_summary: bool = False,
):
    """Decorator for logging directory operations.

    Args:
        operation_name: Name of the operation for logging
        log_level: Logging level (default: DEBUG)
        include_timing: Whether to include execution timing
        include_result_summary: Whether to include result id or count
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> Any:
            start_time = utc_now() if include_timing else None
            log_context = {"operation": operation_name, **_operation_context(func, args, kwargs)}

            logger.log(log_level, f"Starting {operation_name} | {log_context}")
            try:
                result = await func(*args, **kwargs)
            finally:
                if start_time:
                    duration_ms = (utc_now() - start_time).total_seconds() * 1000
                    log_context["duration_ms"] = f"{duration_ms:.2f}"

            if include_result_summary and result is not None:
                if hasattr(result, "id"):
                    log_context["result_id"] = str(result.id)
                elif isinstance(result, list):
                    log_context["result_count"] = len(result)

            logger.log(log_level, f"Completed {operation_name} | {log_context}")
            return result

        return wrapper
    return decorator
