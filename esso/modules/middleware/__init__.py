"""
Middleware Module - Black Box Interface

Purpose: Guard a whole FastAPI application with Esso tokens
Interface: EssoMiddleware, create_esso_middleware()
Hidden: Skip-path matching, error rendering, response header merging

Use this instead of require_authentication() when every route except a
few public ones needs a token.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from ...errors import ConfigurationError
from ..auth import TokenValidator

logger = logging.getLogger(__name__)


class EssoMiddleware:
    """
    Token authentication middleware for FastAPI applications.

    Runs the token validator on every request that is not listed in
    ``skip_paths`` and renders rejections as JSON.
    """

    def __init__(
        self,
        validator: TokenValidator,
        skip_paths: Optional[Dict[str, list]] = None,
        log_attempts: bool = True
    ):
        """
        Initialize authentication middleware.

        Args:
            validator: TokenValidator (usually ``Esso(...).validator``)
            skip_paths: Dict of {path: [methods]} to skip authentication
            log_attempts: Whether to log authentication attempts
        """
        self.validator = validator
        self.skip_paths = skip_paths or {}
        self.log_attempts = log_attempts

    def should_skip_auth(self, request: Request) -> bool:
        """Check if authentication should be skipped for this request."""
        path = str(request.url.path)
        method = request.method.upper()

        if path in self.skip_paths:
            allowed_methods = self.skip_paths[path]
            if "*" in allowed_methods or method in allowed_methods:
                return True

        return False

    def format_error(self, status_code: int, message: Any) -> Dict[str, Any]:
        """Body of a rejection response."""
        return {
            "error": message,
            "status": status_code
        }

    async def __call__(self, request: Request, call_next):
        """Process the request through authentication middleware."""
        if self.should_skip_auth(request):
            if self.log_attempts:
                logger.debug(f"Skipping auth for {request.method} {request.url.path}")
            return await call_next(request)

        # Headers and cookies set by the extra validation hook end up on the real response
        hook_response = Response()
        try:
            await self.validator.validate(request, hook_response)
        except HTTPException as e:
            return JSONResponse(
                status_code=e.status_code,
                content=self.format_error(e.status_code, e.detail),
                headers=e.headers,
            )
        except ConfigurationError as e:
            logger.error(f"Error during authentication: {e}")
            return JSONResponse(
                status_code=500,
                content=self.format_error(500, "Internal error during authentication")
            )

        if self.log_attempts:
            logger.info(f"Request to {request.url.path} authenticated")

        response = await call_next(request)
        for key, value in hook_response.headers.raw:
            if key.lower() != b"content-length":
                response.headers.append(key.decode("latin-1"), value.decode("latin-1"))
        return response


def create_esso_middleware(
    esso,
    skip_paths: Optional[Dict[str, list]] = None
) -> EssoMiddleware:
    """
    Factory function to create token authentication middleware.

    Args:
        esso: Esso plugin instance
        skip_paths: Paths to skip authentication {"/path": ["GET", "POST"]}

    Returns:
        Configured EssoMiddleware instance
    """
    default_skip_paths = {
        "/health": ["GET"],
    }

    if skip_paths:
        default_skip_paths.update(skip_paths)

    return EssoMiddleware(
        validator=esso.validator,
        skip_paths=default_skip_paths
    )


__all__ = [
    "EssoMiddleware",
    "create_esso_middleware"
]
