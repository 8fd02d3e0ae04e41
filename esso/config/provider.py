"""Configuration provider following Black Box Design principles."""
import os
from dataclasses import dataclass, field, fields
from typing import Any, Callable, Iterable, Mapping, Optional, Protocol, Union

from ..errors import ConfigurationError
from ..modules.auth.interfaces import ExtraValidator, is_extra_validator
from ..modules.crypto import validate_secret


@dataclass(frozen=True)
class RenameOptions:
    """External names of the three plugin capabilities."""
    auth: str = "auth"
    generate_auth_token: str = "generate_auth_token"
    require_authentication: str = "require_authentication"

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "RenameOptions":
        """Merge a partial rename map over the defaults."""
        known = {f.name for f in fields(cls)}
        unknown = set(values) - known
        if unknown:
            raise ConfigurationError(f"unknown rename targets: {', '.join(sorted(unknown))}")
        return cls(**values)

    def validate(self, reserved_names: Iterable[str] = ()) -> None:
        """
        Check rename targets.

        Raises:
            ConfigurationError: If a target is empty, the two function names
                collide, or a function name shadows a reserved attribute
        """
        for name in ("auth", "generate_auth_token", "require_authentication"):
            value = getattr(self, name)
            if not value or not isinstance(value, str):
                raise ConfigurationError(f"rename.{name} should be a non empty string")

        if self.generate_auth_token == self.require_authentication:
            raise ConfigurationError(
                "rename.generate_auth_token and rename.require_authentication should have distinct values"
            )

        reserved = set(reserved_names)
        for name in ("generate_auth_token", "require_authentication"):
            value = getattr(self, name)
            if value in reserved:
                raise ConfigurationError(f"rename.{name} cannot be '{value}': the name is already taken")


@dataclass(frozen=True)
class EssoOptions:
    """Plugin options, consumed once at construction."""
    secret: Optional[str] = None
    header_name: str = "authorization"
    disable_headers: bool = False
    disable_query: bool = False
    disable_cookies: bool = False
    token_prefix: Optional[str] = "Bearer "
    extra_validation: Optional[Union[ExtraValidator, Callable[..., Any]]] = None
    rename: RenameOptions = field(default_factory=RenameOptions)

    def __post_init__(self):
        if isinstance(self.rename, Mapping):
            object.__setattr__(self, "rename", RenameOptions.from_mapping(self.rename))
        elif self.rename is None:
            object.__setattr__(self, "rename", RenameOptions())

    def validate(self, reserved_names: Iterable[str] = ()) -> None:
        """
        Validate every option.

        Args:
            reserved_names: Names the capability functions may not take

        Raises:
            ConfigurationError: On the first invalid option
        """
        validate_secret(self.secret)

        if not self.header_name:
            raise ConfigurationError("header_name cannot be null")
        if not isinstance(self.header_name, str):
            raise ConfigurationError("header_name should be a string")

        if self.extra_validation is not None and not is_extra_validator(self.extra_validation):
            raise ConfigurationError("extra_validation should be either None or a callable")

        if self.disable_headers and self.disable_query and self.disable_cookies:
            raise ConfigurationError(
                "at least one of the following flags should be false: "
                "disable_headers, disable_query, disable_cookies"
            )

        if self.token_prefix is not None and not isinstance(self.token_prefix, str):
            raise ConfigurationError("token_prefix should be either None or a string")

        if not isinstance(self.rename, RenameOptions):
            raise ConfigurationError("rename should be a mapping of capability names")
        self.rename.validate(reserved_names)


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_esso_options(self) -> EssoOptions:
        """Get plugin options."""
        ...


def _env_flag(name: str) -> bool:
    return os.getenv(name, "false").lower() == "true"


class EnvConfigProvider:
    """Environment-based configuration provider."""

    def get_esso_options(self) -> EssoOptions:
        """Get plugin options from environment variables."""
        # The secret is required - no default for security
        secret = os.getenv("ESSO_SECRET")
        if not secret:
            raise ConfigurationError(
                "ESSO_SECRET environment variable is required. "
                "Use a random string of at least 20 characters."
            )

        prefix_env = os.getenv("ESSO_TOKEN_PREFIX")
        if prefix_env is None:
            token_prefix: Optional[str] = "Bearer "
        elif prefix_env.lower() == "none":
            token_prefix = None
        else:
            token_prefix = prefix_env

        defaults = RenameOptions()
        rename = RenameOptions(
            auth=os.getenv("ESSO_RENAME_AUTH", defaults.auth),
            generate_auth_token=os.getenv("ESSO_RENAME_GENERATE", defaults.generate_auth_token),
            require_authentication=os.getenv("ESSO_RENAME_REQUIRE", defaults.require_authentication),
        )

        return EssoOptions(
            secret=secret,
            header_name=os.getenv("ESSO_HEADER_NAME", "authorization"),
            disable_headers=_env_flag("ESSO_DISABLE_HEADERS"),
            disable_query=_env_flag("ESSO_DISABLE_QUERY"),
            disable_cookies=_env_flag("ESSO_DISABLE_COOKIES"),
            token_prefix=token_prefix,
            rename=rename,
        )
