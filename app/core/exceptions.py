"""
Application Exception Handling

Single AppException class for all application errors with FastAPI integration.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


logger = logging.getLogger(__name__)


class AppException(Exception):
    """
    Unified application exception for all error scenarios.

    Provides consistent error response format across the entire API.

    Usage:
        raise AppException("Product not found", "PRODUCT_NOT_FOUND", 404)
        raise AppException("File too large", "FILE_TOO_LARGE", 400, {"max_bytes": 5242880})

    Error Codes:
        Validation:
            - MISSING_FIELDS (400)
            - INVALID_PRICE (400)
            - INVALID_FILE_TYPE (400)
            - FILE_TOO_LARGE (400)
            - VALIDATION_ERROR (400)

        Product:
            - PRODUCT_NOT_FOUND (404)

        General:
            - STORAGE_ERROR (500)
            - INTERNAL_ERROR (500)
    """

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 400,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize application exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code (e.g., "PRODUCT_NOT_FOUND")
            status_code: HTTP status code (default: 400)
            details: Additional error context (optional)
        """
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        error_dict = {
            "success": False,
            "message": self.message,
            "error": {
                "code": self.code,
                "message": self.message,
                "timestamp": self.timestamp
            }
        }

        if self.details:
            error_dict["error"]["details"] = self.details

        return error_dict


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    FastAPI exception handler for AppException.

    Converts AppException to consistent JSON error response.
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def request_validation_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """Report malformed request bodies as 400 with the offending fields."""
    fields = [
        ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        for error in exc.errors()
    ]
    error = validation_error("Invalid request data", {"fields": fields})
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unexpected errors server-side and hide them from the client."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    error = internal_error()
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register all exception handlers with FastAPI app.

    Call this in main.py after creating the FastAPI instance.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


# ============================================
# CONVENIENCE FACTORY FUNCTIONS
# ============================================

def product_not_found(product_id: Optional[str] = None) -> AppException:
    """Create product not found exception."""
    details = {"product_id": product_id} if product_id else {}
    return AppException("Product not found", "PRODUCT_NOT_FOUND", 404, details)


def missing_fields(fields: list) -> AppException:
    """Create missing required fields exception."""
    return AppException(
        "All fields (titulo, descricao, preco) are required",
        "MISSING_FIELDS",
        400,
        {"missing": fields}
    )


def invalid_price(value: str) -> AppException:
    """Create invalid price exception."""
    return AppException(
        "Price must be a non-negative number",
        "INVALID_PRICE",
        400,
        {"preco": value}
    )


def invalid_file_type(allowed: list) -> AppException:
    """Create disallowed upload type exception."""
    return AppException(
        f"Only images ({', '.join(allowed)}) are allowed",
        "INVALID_FILE_TYPE",
        400,
        {"allowed": allowed}
    )


def file_too_large(max_bytes: int) -> AppException:
    """Create oversized upload exception."""
    return AppException(
        f"Image exceeds the maximum size of {max_bytes // (1024 * 1024)} MB",
        "FILE_TOO_LARGE",
        400,
        {"max_bytes": max_bytes}
    )


def validation_error(message: str, details: Optional[Dict[str, Any]] = None) -> AppException:
    """Create generic request validation exception."""
    return AppException(message, "VALIDATION_ERROR", 400, details)


def storage_error(message: str = "Failed to store uploaded image") -> AppException:
    """Create storage failure exception."""
    return AppException(message, "STORAGE_ERROR", 500)


def internal_error(message: str = "Internal server error") -> AppException:
    """Create internal server error exception."""
    return AppException(message, "INTERNAL_ERROR", 500)
