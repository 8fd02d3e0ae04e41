"""Extra-validation interfaces following Black Box Design principles."""

import inspect
from typing import Any, Callable, Optional, Protocol, runtime_checkable

from ...errors import ConfigurationError


@runtime_checkable
class ExtraValidator(Protocol):
    """Protocol for checks that run after a token has been decoded."""

    async def validate(self, request: Any, response: Any) -> None:
        """
        Accept or reject an authenticated request.

        The decoded payload is already attached to the request. Reject by
        raising; the exception reaches the client unchanged, so an
        HTTPException keeps its own status code and message.

        Args:
            request: Incoming request
            response: Response the route will send (headers/cookies may be set)
        """
        ...


class NoopValidator:
    """Default hook: accepts everything."""

    async def validate(self, request: Any, response: Any) -> None:
        return None


class CallableValidator:
    """Adapts a plain ``func(request, response)`` to ExtraValidator."""

    def __init__(self, func: Callable[[Any, Any], Any]):
        self._func = func

    async def validate(self, request: Any, response: Any) -> None:
        result = self._func(request, response)
        if inspect.isawaitable(result):
            result = await result
        # Returning an exception rejects the same way raising it does
        if isinstance(result, BaseException):
            raise result


def _has_validate_method(hook: Any) -> bool:
    return isinstance(hook, ExtraValidator) and callable(hook.validate)


def is_extra_validator(hook: Any) -> bool:
    """True if ``hook`` can be used as extra validation."""
    return _has_validate_method(hook) or callable(hook)


def as_extra_validator(hook: Optional[Any]) -> ExtraValidator:
    """
    Normalize the ``extra_validation`` option.

    Objects whose ``validate`` is a plain method are wrapped so their
    result is only awaited when it is awaitable.

    Raises:
        ConfigurationError: If ``hook`` is neither None, an ExtraValidator nor callable
    """
    if hook is None:
        return NoopValidator()
    if _has_validate_method(hook):
        if inspect.iscoroutinefunction(hook.validate):
            return hook
        return CallableValidator(hook.validate)
    if callable(hook):
        return CallableValidator(hook)
    raise ConfigurationError("extra_validation should be either None or a callable")
