"""Behaviour shared by the operation groups."""

import typing

from fastly_storage import connection, errors
from fastly_storage import logger as logger_


class Operations:
    """Base class for a family of S3 calls.

    Subclasses issue requests through :attr:`connection` and translate
    every failure with :meth:`_failure` so callers only ever see
    :class:`~fastly_storage.errors.StorageError`.

    """

    def __init__(
        self,
        s3: connection.S3Connection,
        logger: logger_.Logger,
    ) -> None:
        self.connection = s3
        self.logger = logger

    async def _client(self) -> typing.Any:
        return await self.connection.client()

    def _failure(
        self,
        message: str,
        err: Exception,
        **context: typing.Any,
    ) -> errors.StorageError:
        """Log a failed operation and return the normalized error.

        Args:
            message: Description of what failed
            err: The exception raised by the backend call
            context: Operation name, bucket, key, ...

        Returns:
            The error to raise

        """
        details = ', '.join(
            f'{name}={value}' for name, value in context.items()
        )
        self.logger.error('%s (%s): %s', message, details, err)
        return errors.StorageError.from_exception(err, **context)
