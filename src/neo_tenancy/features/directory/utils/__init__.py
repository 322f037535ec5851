from .error_handling import directory_error_handler, log_directory_operation

__all__ = ["directory_error_handler", "log_directory_operation"]
