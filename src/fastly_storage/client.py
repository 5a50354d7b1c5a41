"""Client facade for Fastly Object Storage."""

import datetime
import typing

import pydantic

from fastly_storage import (
    connection,
    errors,
    models,
    operations,
    settings,
    validation,
)
from fastly_storage import logger as logger_


def load_settings(
    config: settings.Storage | None = None,
    **overrides: typing.Any,
) -> settings.Storage:
    """Resolve the storage configuration.

    Explicit ``overrides`` win over ``FASTLY_*`` environment variables,
    which win over defaults. ``None`` values count as not supplied.

    Raises:
        StorageError: ``InvalidConfig`` if a value cannot be parsed.

    """
    overrides = {
        name: value for name, value in overrides.items() if value is not None
    }
    try:
        if config is None:
            return settings.Storage(**overrides)
        if overrides:
            return settings.Storage(**{**config.model_dump(), **overrides})
        return config
    except pydantic.ValidationError as err:
        error = err.errors()[0]
        field = '.'.join(str(part) for part in error['loc'])
        raise errors.StorageError(
            f'Invalid configuration value for {field}: {error["msg"]}',
            errors.ErrorCode.INVALID_CONFIG,
            context={'field': field},
            cause=err,
        ) from err


class StorageClient:
    """Async client for Fastly Object Storage and other S3 services.

    Configuration is resolved and validated when the client is built;
    an invalid configuration raises ``InvalidConfig`` and no S3 client
    is created. Every bucket name and object key is validated before a
    request is sent.

    Use as an async context manager or call :meth:`destroy` once when
    finished::

        async with StorageClient(endpoint='https://...') as client:
            await client.upload_object('bucket', 'key', b'data')

    """

    def __init__(
        self,
        config: settings.Storage | None = None,
        *,
        logger: logger_.Logger | None = None,
        **overrides: typing.Any,
    ) -> None:
        self._config = load_settings(config, **overrides)
        validation.validate_config(self._config)
        self._logger: logger_.Logger = logger or logger_.DefaultLogger(
            self._config.debug
        )

        self._connection = connection.S3Connection(
            self._config, self._logger
        )
        self._buckets = operations.BucketOperations(
            self._connection, self._logger
        )
        self._objects = operations.ObjectOperations(
            self._connection, self._logger
        )
        ttl = self._config.multipart_session_ttl
        self._multipart = operations.MultipartOperations(
            self._connection,
            self._logger,
            datetime.timedelta(seconds=ttl) if ttl is not None else None,
        )
        self._presigned = operations.PresignedUrlOperations(
            self._connection, self._logger
        )
        self._logger.info(
            'Fastly Storage client initialized (endpoint %s, region %s)',
            self._config.endpoint,
            self._config.region,
        )

    async def __aenter__(self) -> 'StorageClient':
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.destroy()

    @property
    def config(self) -> settings.Storage:
        return self._config

    # Buckets

    async def create_bucket(
        self,
        name: str,
        options: models.BucketConfig | None = None,
        **kwargs: typing.Any,
    ) -> None:
        """Create a bucket.

        Args:
            name: Bucket name
            options: ACL and region, or pass them as keyword arguments

        """
        validation.validate_bucket_name(name)
        await self._buckets.create_bucket(
            name, _options(models.BucketConfig, options, kwargs)
        )

    async def delete_bucket(self, name: str) -> None:
        """Delete a bucket (it must be empty)."""
        validation.validate_bucket_name(name)
        await self._buckets.delete_bucket(name)

    async def list_buckets(self) -> list[models.BucketInfo]:
        return await self._buckets.list_buckets()

    async def get_bucket_info(self, name: str) -> models.BucketInfo:
        validation.validate_bucket_name(name)
        return await self._buckets.get_bucket_info(name)

    # Objects

    async def upload_object(
        self,
        bucket: str,
        key: str,
        data: models.UploadData,
        options: models.UploadObjectOptions | None = None,
        **kwargs: typing.Any,
    ) -> models.UploadResult:
        """Upload an object in a single request.

        Args:
            bucket: Bucket name
            key: Object key
            data: Bytes, text or a binary file object
            options: Upload options, or pass them as keyword arguments

        Returns:
            The ETag, version and encryption of the stored object

        """
        _validate(bucket, key)
        return await self._objects.upload_object(
            bucket,
            key,
            data,
            _options(models.UploadObjectOptions, options, kwargs),
        )

    async def get_object(
        self,
        bucket: str,
        key: str,
        options: models.GetObjectOptions | None = None,
        **kwargs: typing.Any,
    ) -> models.DownloadResult:
        """Download an object into memory."""
        _validate(bucket, key)
        return await self._objects.get_object(
            bucket, key, _options(models.GetObjectOptions, options, kwargs)
        )

    async def get_object_stream(
        self,
        bucket: str,
        key: str,
        options: models.GetObjectOptions | None = None,
        **kwargs: typing.Any,
    ) -> typing.Any:
        """Return an object's unread body stream.

        The caller must read and close the stream::

            stream = await client.get_object_stream('bucket', 'key')
            async with stream:
                async for chunk in stream.iter_chunks():
                    ...

        """
        _validate(bucket, key)
        return await self._objects.get_object_stream(
            bucket, key, _options(models.GetObjectOptions, options, kwargs)
        )

    async def delete_object(self, bucket: str, key: str) -> None:
        _validate(bucket, key)
        await self._objects.delete_object(bucket, key)

    async def copy_object(
        self,
        source_bucket: str,
        source_key: str,
        dest_bucket: str,
        dest_key: str,
        options: models.CopyObjectOptions | None = None,
        **kwargs: typing.Any,
    ) -> models.UploadResult:
        """Copy an object, optionally replacing its metadata."""
        _validate(source_bucket, source_key)
        _validate(dest_bucket, dest_key)
        return await self._objects.copy_object(
            source_bucket,
            source_key,
            dest_bucket,
            dest_key,
            _options(models.CopyObjectOptions, options, kwargs),
        )

    async def head_object(
        self, bucket: str, key: str
    ) -> models.ObjectMetadata:
        _validate(bucket, key)
        return await self._objects.head_object(bucket, key)

    async def list_objects(
        self,
        bucket: str,
        options: models.ListObjectsOptions | None = None,
        **kwargs: typing.Any,
    ) -> models.ListObjectsResult:
        """Return one page of a bucket listing.

        Feed ``next_continuation_token`` back as ``continuation_token``
        until ``is_truncated`` is False, or use :meth:`iter_objects`.

        """
        validation.validate_bucket_name(bucket)
        return await self._objects.list_objects(
            bucket, _options(models.ListObjectsOptions, options, kwargs)
        )

    def iter_objects(
        self,
        bucket: str,
        prefix: str | None = None,
        delimiter: str | None = None,
        page_size: int | None = None,
    ) -> typing.AsyncIterator[models.ObjectInfo]:
        """Iterate over every object in a bucket across all pages."""
        validation.validate_bucket_name(bucket)
        return self._objects.iter_objects(
            bucket, prefix, delimiter, page_size
        )

    # Multipart uploads

    async def create_multipart_upload(
        self,
        bucket: str,
        key: str,
        options: models.UploadObjectOptions | None = None,
        **kwargs: typing.Any,
    ) -> models.MultipartUploadResult:
        _validate(bucket, key)
        return await self._multipart.create_multipart_upload(
            bucket,
            key,
            _options(models.UploadObjectOptions, options, kwargs),
        )

    async def upload_part(
        self,
        upload_id: str,
        part_number: int,
        data: bytes,
    ) -> models.UploadPartResult:
        return await self._multipart.upload_part(upload_id, part_number, data)

    async def complete_multipart_upload(
        self,
        upload_id: str,
        parts: typing.Sequence[models.UploadPart | models.UploadPartResult],
    ) -> models.UploadResult:
        """Complete a multipart upload from the caller's list of parts."""
        return await self._multipart.complete_multipart_upload(
            upload_id,
            [
                part.as_part()
                if isinstance(part, models.UploadPartResult)
                else part
                for part in parts
            ],
        )

    async def abort_multipart_upload(self, upload_id: str) -> None:
        await self._multipart.abort_multipart_upload(upload_id)

    def multipart_sessions(self) -> list[models.MultipartSession]:
        """Return the multipart uploads tracked by this client."""
        return self._multipart.sessions()

    def prune_multipart_sessions(
        self, max_age: datetime.timedelta
    ) -> list[models.MultipartSession]:
        return self._multipart.prune_sessions(max_age)

    # Presigned URLs

    async def get_presigned_download_url(
        self, bucket: str, key: str, expires_in: int = 3600
    ) -> str:
        _validate(bucket, key)
        return await self._presigned.get_presigned_download_url(
            bucket, key, expires_in
        )

    async def get_presigned_upload_url(
        self, bucket: str, key: str, expires_in: int = 3600
    ) -> str:
        _validate(bucket, key)
        return await self._presigned.get_presigned_upload_url(
            bucket, key, expires_in
        )

    async def destroy(self) -> None:
        """Close the underlying S3 client and its connection pool."""
        await self._connection.aclose()
        self._logger.info('Fastly Storage client destroyed')


_Options = typing.TypeVar('_Options', bound=pydantic.BaseModel)


def _options(
    model: type[_Options],
    options: _Options | None,
    kwargs: dict[str, typing.Any],
) -> _Options:
    """Merge an options model with keyword overrides.

    Raises:
        pydantic.ValidationError: for unknown or mistyped options.

    """
    if options is None:
        return model(**kwargs)
    if kwargs:
        return model(**{**options.model_dump(exclude_unset=True), **kwargs})
    return options


def _validate(bucket: str, key: str) -> None:
    validation.validate_bucket_name(bucket)
    validation.validate_object_key(key)
