"""Logging sink used by the storage client."""

import logging
import typing

LOGGER = logging.getLogger('fastly_storage')


@typing.runtime_checkable
class Logger(typing.Protocol):
    """Anything with the four level methods of :class:`logging.Logger`.

    A standard library logger satisfies this protocol, as does a
    :class:`logging.LoggerAdapter`.

    """

    def debug(self, msg: str, *args: typing.Any, **kwargs: typing.Any) -> None:
        ...

    def info(self, msg: str, *args: typing.Any, **kwargs: typing.Any) -> None:
        ...

    def warning(
        self, msg: str, *args: typing.Any, **kwargs: typing.Any
    ) -> None:
        ...

    def error(self, msg: str, *args: typing.Any, **kwargs: typing.Any) -> None:
        ...


class DefaultLogger(logging.LoggerAdapter):  # type: ignore[type-arg]
    """Logger used when the caller does not supply one.

    Debug and info records are only emitted when ``debug`` is set;
    warnings and errors always pass through to the ``fastly_storage``
    logger.

    """

    def __init__(
        self,
        debug: bool = False,
        logger: logging.Logger = LOGGER,
    ) -> None:
        super().__init__(logger, {})
        self.debug_enabled = debug

    def isEnabledFor(self, level: int) -> bool:  # noqa: N802
        if level < logging.WARNING and not self.debug_enabled:
            return False
        return super().isEnabledFor(level)
