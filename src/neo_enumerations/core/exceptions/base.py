"""Base exceptions for neo-enumerations.

All exceptions inherit from NeoEnumerationsError and carry an error code
plus a details dictionary so callers can render structured errors.
"""

from typing import Any, Dict, Optional


class NeoEnumerationsError(Exception):
    """Base exception for all neo-enumerations errors."""
    
    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        *args,
        **kwargs
    ):
        super().__init__(message, *args, **kwargs)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}


def create_error_response(exception: NeoEnumerationsError) -> Dict[str, Any]:
    """Create standardized error response from exception.
    
    Args:
        exception: The neo-enumerations exception
        
    Returns:
        Error response dictionary
    """
    return {
        "error": {
            "code": exception.error_code,
            "message": exception.message,
            "details": exception.details,
            "type": exception.__class__.__name__,
        }
    }
