"""Logging utilities for backing-store operations."""

import logging
import functools
import time
from typing import Any, Callable

logger = logging.getLogger(__name__)


def log_store_operation(
    operation_name: str,
    log_level: int = logging.DEBUG,
    include_timing: bool = True
):
    """Decorator for logging enumeration store operations.
    
    The first positional argument after ``self`` is expected to be the
    EnumerationType the operation runs against.
    
    Args:
        operation_name: Name of the operation for logging
        log_level: Logging level (default: DEBUG)
        include_timing: Whether to include execution timing
        
    Usage:
        @log_store_operation("list records")
        async def list(self, enumeration_type):
            ...
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(self, *args, **kwargs) -> Any:
            start_time = time.perf_counter() if include_timing else None
            
            log_context = {"operation": operation_name, "store": type(self).__name__}
            if args and hasattr(args[0], "name"):
                log_context["enumeration"] = args[0].name
            
            logger.log(log_level, f"Starting {operation_name} | {log_context}")
            
            try:
                result = await func(self, *args, **kwargs)
                
                if start_time is not None:
                    log_context["duration_ms"] = f"{(time.perf_counter() - start_time) * 1000:.2f}"
                
                logger.log(log_level, f"Completed {operation_name} | {log_context}")
                return result
                
            except Exception as e:
                if start_time is not None:
                    log_context["duration_ms"] = f"{(time.perf_counter() - start_time) * 1000:.2f}"
                
                log_context["error"] = str(e)
                logger.error(f"Failed {operation_name} | {log_context}")
                raise
        
        return wrapper
    return decorator
