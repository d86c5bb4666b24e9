"""
Error responses shared by the endpoint modules
"""
from fastapi import HTTPException

from config import settings

GENERIC_ERROR = "Something went wrong!"


def error_detail(action: str, error: Exception) -> str:
    """Include the underlying message outside production"""
    if settings.app.is_production:
        return GENERIC_ERROR
    return f"Failed to {action}: {str(error)}"


def server_error(action: str, error: Exception) -> HTTPException:
    return HTTPException(status_code=500, detail=error_detail(action, error))
