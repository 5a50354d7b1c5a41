"""Ownership of the aioboto3 session and the S3 client it opens."""

import asyncio
import contextlib
import typing

import aioboto3
from botocore import config as botocore_config

from fastly_storage import errors, settings
from fastly_storage import logger as logger_


class S3Connection:
    """Holds a single aiobotocore S3 client for the lifetime of a client.

    The client is opened lazily on first use so the connection can be
    created outside of a running event loop. It stays open, reusing its
    connection pool, until :meth:`aclose` is called.

    """

    def __init__(
        self,
        config: settings.Storage,
        logger: logger_.Logger | None = None,
    ) -> None:
        self._settings = config
        self._logger: logger_.Logger = logger or logger_.DefaultLogger(
            config.debug
        )
        self._session = aioboto3.Session(
            aws_access_key_id=config.access_key_id,
            aws_secret_access_key=config.secret_access_key,
            region_name=config.region,
        )
        self._client: typing.Any = None
        self._closed = False
        self._exit_stack = contextlib.AsyncExitStack()
        self._lock = asyncio.Lock()

    @property
    def closed(self) -> bool:
        return self._closed

    def client_config(self) -> botocore_config.Config:
        """Build the botocore configuration for the S3 client."""
        return botocore_config.Config(
            connect_timeout=self._settings.timeout_seconds,
            read_timeout=self._settings.timeout_seconds,
            retries={
                'max_attempts': self._settings.max_retries + 1,
                'mode': 'standard',
            },
            s3={
                'addressing_style': (
                    'path' if self._settings.force_path_style else 'auto'
                ),
            },
            signature_version='s3v4',
        )

    async def client(self) -> typing.Any:
        """Return the open S3 client, creating it on first use.

        Raises:
            StorageError: ``ClientClosed`` after :meth:`aclose`.

        """
        if self._client is not None:
            return self._client

        async with self._lock:
            if self._closed:
                raise errors.StorageError(
                    'Storage client has been destroyed',
                    errors.ErrorCode.CLIENT_CLOSED,
                )
            if self._client is None:
                self._client = await self._exit_stack.enter_async_context(
                    self._session.client(
                        's3',
                        endpoint_url=self._settings.endpoint,
                        config=self.client_config(),
                    )
                )
                self._logger.debug(
                    'Opened S3 client for %s', self._settings.endpoint
                )
        return self._client

    async def aclose(self) -> None:
        """Close the S3 client and release its connection pool."""
        async with self._lock:
            self._closed = True
            self._client = None
            await self._exit_stack.aclose()
            self._logger.debug('S3 client closed')
