"""
FastAPI integration for Esso tokens.

``Esso`` wires the key store, extractor, issuer and validator together
and exposes three capabilities under configurable names:

- ``require_authentication(scope)``: guard every route declared afterwards
  on an APIRouter or FastAPI app
- ``generate_auth_token(payload)``: issue a token
- ``request.state.auth``: the payload of an authenticated request

Renaming lets several independent instances live in one application.
"""

import logging
from dataclasses import replace
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional, Union

from fastapi import APIRouter, Depends, FastAPI, Request, Response

from .config.provider import EssoOptions
from .errors import ConfigurationError, Unauthorized
from .modules.auth import TokenIssuer, TokenValidator, as_extra_validator
from .modules.extraction import FieldExtractor
from .modules.keys import KeyStore

logger = logging.getLogger(__name__)

Scope = Union[APIRouter, FastAPI]

# Instance attributes set in __init__; capability names may not reuse them
_INSTANCE_ATTRIBUTES = frozenset(
    {"options", "key_store", "extractor", "issuer", "validator", "auth_field", "bindings", "dependency"}
)


def get_auth(request: Request, field: str = "auth") -> Dict[str, Any]:
    """
    Return the authenticated context of a request.

    Raises:
        Unauthorized: If the request did not pass token validation
    """
    try:
        return getattr(request.state, field)
    except AttributeError:
        raise Unauthorized() from None


class Esso:
    """Stateless encrypted token authentication for a FastAPI application."""

    def __init__(self, options: Optional[EssoOptions] = None, **overrides: Any):
        """
        Build the plugin.

        Args:
            options: Plugin options; keyword arguments override single fields

        Raises:
            ConfigurationError: If any option is invalid
        """
        if options is None:
            options = EssoOptions(**overrides)
        elif overrides:
            options = replace(options, **overrides)

        options.validate(reserved_names=self.reserved_names())
        self.options = options

        self.key_store = KeyStore(options.header_name)
        self.key_store.rotate(options.secret)

        self.extractor = FieldExtractor(
            options.header_name,
            disable_headers=options.disable_headers,
            disable_query=options.disable_query,
            disable_cookies=options.disable_cookies,
        )
        self.issuer = TokenIssuer(self.key_store, options.token_prefix)
        self.auth_field = options.rename.auth
        self.validator = TokenValidator(
            self.key_store,
            self.extractor,
            token_prefix=options.token_prefix,
            auth_field=self.auth_field,
            extra_validator=as_extra_validator(options.extra_validation),
        )

        async def authenticate(request: Request, response: Response) -> Dict[str, Any]:
            return await self.validator.validate(request, response)

        self.dependency = authenticate

        # Resolved once; requests never look names up again
        self.bindings: Mapping[str, Callable[..., Any]] = MappingProxyType(
            {
                options.rename.require_authentication: self._require_authentication,
                options.rename.generate_auth_token: self.issuer.issue,
            }
        )
        for name, capability in self.bindings.items():
            setattr(self, name, capability)

        logger.info(
            f"Esso initialized (field: {options.header_name}, "
            f"require: {options.rename.require_authentication}, "
            f"generate: {options.rename.generate_auth_token}, auth: {self.auth_field})"
        )

    @classmethod
    def reserved_names(cls) -> frozenset:
        """Attribute names the capability functions cannot be renamed to."""
        return frozenset(name for name in dir(cls)) | _INSTANCE_ATTRIBUTES

    def _require_authentication(self, scope: Scope) -> Scope:
        """
        Require authentication for every route of a scope.

        Routes declared on the scope before this call are not guarded.

        Args:
            scope: APIRouter or FastAPI application

        Returns:
            The same scope, for chaining
        """
        if isinstance(scope, FastAPI):
            dependencies = scope.router.dependencies
        elif isinstance(scope, APIRouter):
            dependencies = scope.dependencies
        else:
            raise TypeError(f"cannot require authentication on {type(scope).__name__}")

        dependencies.append(Depends(self.dependency))
        return scope

    async def set_secret(self, new_secret: str) -> None:
        """
        Rotate to a new secret.

        Tokens issued under the previous secret keep working until the next
        rotation.

        Raises:
            ConfigurationError: If the secret is missing or shorter than 20 characters
        """
        await self.key_store.rotate_async(new_secret)

    def auth(self, request: Request) -> Dict[str, Any]:
        """Authenticated context of ``request`` under this instance's field name."""
        return get_auth(request, self.auth_field)

    def register(self, app: FastAPI) -> FastAPI:
        """
        Expose the capabilities on ``app.state`` under their configured names.

        Raises:
            ConfigurationError: If another instance already registered one of the names
        """
        for name, capability in self.bindings.items():
            existing = getattr(app.state, name, None)
            if existing is not None and existing != capability:
                raise ConfigurationError(f"app.state.{name} is already registered")
        for name, capability in self.bindings.items():
            setattr(app.state, name, capability)
        return app
