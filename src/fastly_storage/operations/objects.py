"""Object operations."""

import typing

from fastly_storage import errors, models
from fastly_storage.operations import base


def _body(data: models.UploadData) -> typing.Any:
    if isinstance(data, str):
        return data.encode('utf-8')
    if isinstance(data, bytearray):
        return bytes(data)
    return data


class ObjectOperations(base.Operations):
    """Upload, download, copy, inspect and list objects."""

    async def upload_object(
        self,
        bucket: str,
        key: str,
        data: models.UploadData,
        options: models.UploadObjectOptions | None = None,
    ) -> models.UploadResult:
        """Store an object with a single PUT request.

        Args:
            bucket: Bucket name
            key: Object key
            data: Bytes, text (UTF-8 encoded) or a binary file object
            options: Headers and metadata passed through to the backend

        Returns:
            The ETag, version and encryption reported by the backend

        """
        options = options or models.UploadObjectOptions()
        self.logger.info('Uploading object %s/%s', bucket, key)
        try:
            s3 = await self._client()
            response = await s3.put_object(
                Bucket=bucket,
                Key=key,
                Body=_body(data),
                **options.to_params(),
            )
        except Exception as err:
            raise self._failure(
                'Failed to upload object',
                err,
                bucket=bucket,
                key=key,
                operation='upload_object',
            )
        self.logger.info(
            'Uploaded object %s/%s (etag %s)',
            bucket,
            key,
            response.get('ETag'),
        )
        return models.UploadResult(
            etag=response.get('ETag'),
            version_id=response.get('VersionId'),
            server_side_encryption=response.get('ServerSideEncryption'),
        )

    async def get_object(
        self,
        bucket: str,
        key: str,
        options: models.GetObjectOptions | None = None,
    ) -> models.DownloadResult:
        """Download an object into memory.

        Raises:
            StorageError: ``EmptyBody`` if the response has no payload.

        """
        self.logger.info('Getting object %s/%s', bucket, key)
        try:
            response = await self._get(bucket, key, options)
            async with response['Body'] as stream:
                body: bytes = await stream.read()
        except Exception as err:
            raise self._failure(
                'Failed to get object',
                err,
                bucket=bucket,
                key=key,
                operation='get_object',
            )
        self.logger.info(
            'Retrieved object %s/%s (%d bytes)', bucket, key, len(body)
        )
        return models.DownloadResult(
            body=body,
            content_type=response.get('ContentType'),
            content_length=response.get('ContentLength') or len(body),
            etag=response.get('ETag') or '',
            last_modified=response.get('LastModified'),
            metadata=response.get('Metadata') or {},
        )

    async def get_object_stream(
        self,
        bucket: str,
        key: str,
        options: models.GetObjectOptions | None = None,
    ) -> typing.Any:
        """Return the unread response body of an object.

        The caller owns the returned aiobotocore ``StreamingBody`` and
        must read and close it (``async with body: ...``).

        Raises:
            StorageError: ``EmptyBody`` if the response has no payload.

        """
        self.logger.info('Getting object stream %s/%s', bucket, key)
        try:
            response = await self._get(bucket, key, options)
        except Exception as err:
            raise self._failure(
                'Failed to get object stream',
                err,
                bucket=bucket,
                key=key,
                operation='get_object_stream',
            )
        self.logger.info('Opened object stream %s/%s', bucket, key)
        return response['Body']

    async def delete_object(self, bucket: str, key: str) -> None:
        self.logger.info('Deleting object %s/%s', bucket, key)
        try:
            s3 = await self._client()
            await s3.delete_object(Bucket=bucket, Key=key)
        except Exception as err:
            raise self._failure(
                'Failed to delete object',
                err,
                bucket=bucket,
                key=key,
                operation='delete_object',
            )
        self.logger.info('Deleted object %s/%s', bucket, key)

    async def copy_object(
        self,
        source_bucket: str,
        source_key: str,
        dest_bucket: str,
        dest_key: str,
        options: models.CopyObjectOptions | None = None,
    ) -> models.UploadResult:
        """Copy an object within the storage service.

        Use ``metadata_directive=REPLACE`` together with ``metadata`` or
        ``content_type`` to change them on the copy.

        """
        options = options or models.CopyObjectOptions()
        self.logger.info(
            'Copying object %s/%s to %s/%s',
            source_bucket,
            source_key,
            dest_bucket,
            dest_key,
        )
        try:
            s3 = await self._client()
            response = await s3.copy_object(
                Bucket=dest_bucket,
                Key=dest_key,
                CopySource=f'{source_bucket}/{source_key}',
                **options.to_params(),
            )
        except Exception as err:
            raise self._failure(
                'Failed to copy object',
                err,
                source_bucket=source_bucket,
                source_key=source_key,
                dest_bucket=dest_bucket,
                dest_key=dest_key,
                operation='copy_object',
            )
        self.logger.info(
            'Copied object %s/%s to %s/%s',
            source_bucket,
            source_key,
            dest_bucket,
            dest_key,
        )
        return models.UploadResult(
            etag=response.get('CopyObjectResult', {}).get('ETag'),
            version_id=response.get('VersionId'),
        )

    async def head_object(
        self, bucket: str, key: str
    ) -> models.ObjectMetadata:
        """Return object metadata without transferring the body."""
        self.logger.debug('Getting object metadata %s/%s', bucket, key)
        try:
            s3 = await self._client()
            response = await s3.head_object(Bucket=bucket, Key=key)
        except Exception as err:
            raise self._failure(
                'Failed to get object metadata',
                err,
                bucket=bucket,
                key=key,
                operation='head_object',
            )
        self.logger.debug('Retrieved object metadata %s/%s', bucket, key)
        return models.ObjectMetadata(
            content_type=response.get('ContentType'),
            content_length=response.get('ContentLength') or 0,
            last_modified=response.get('LastModified'),
            etag=response.get('ETag') or '',
            metadata=response.get('Metadata') or {},
            cache_control=response.get('CacheControl'),
            content_disposition=response.get('ContentDisposition'),
            content_encoding=response.get('ContentEncoding'),
            version_id=response.get('VersionId'),
            storage_class=response.get('StorageClass'),
        )

    async def list_objects(
        self,
        bucket: str,
        options: models.ListObjectsOptions | None = None,
    ) -> models.ListObjectsResult:
        """Return one page of objects in a bucket.

        Pass ``next_continuation_token`` from the result back in as
        ``continuation_token`` until ``is_truncated`` is False.

        """
        options = options or models.ListObjectsOptions()
        self.logger.debug('Listing objects in %s', bucket)
        try:
            s3 = await self._client()
            response = await s3.list_objects_v2(
                Bucket=bucket, **options.to_params()
            )
        except Exception as err:
            raise self._failure(
                'Failed to list objects',
                err,
                bucket=bucket,
                operation='list_objects',
            )

        result = models.ListObjectsResult(
            contents=[
                _object_info(entry) for entry in response.get('Contents', [])
            ],
            common_prefixes=[
                prefix['Prefix']
                for prefix in response.get('CommonPrefixes', [])
            ],
            is_truncated=response.get('IsTruncated', False),
            next_continuation_token=response.get('NextContinuationToken'),
            name=response.get('Name') or bucket,
            prefix=response.get('Prefix'),
            max_keys=response.get('MaxKeys'),
            key_count=response.get('KeyCount', 0),
        )
        self.logger.debug(
            'Listed %d objects in %s', len(result.contents), bucket
        )
        return result

    async def iter_objects(
        self,
        bucket: str,
        prefix: str | None = None,
        delimiter: str | None = None,
        page_size: int | None = None,
    ) -> typing.AsyncIterator[models.ObjectInfo]:
        """Yield every object in a bucket using botocore's paginator.

        Args:
            bucket: Bucket name
            prefix: Only yield keys starting with this prefix
            delimiter: Group keys by this character (prefixes are skipped)
            page_size: Maximum keys requested per page

        """
        params = models.request_params(Prefix=prefix, Delimiter=delimiter)
        if page_size is not None:
            params['PaginationConfig'] = {'PageSize': page_size}

        self.logger.debug('Iterating objects in %s', bucket)
        count = 0
        try:
            s3 = await self._client()
            paginator = s3.get_paginator('list_objects_v2')
            async for page in paginator.paginate(Bucket=bucket, **params):
                for entry in page.get('Contents', []):
                    count += 1
                    yield _object_info(entry)
        except Exception as err:
            raise self._failure(
                'Failed to iterate objects',
                err,
                bucket=bucket,
                operation='iter_objects',
            )
        self.logger.debug('Iterated %d objects in %s', count, bucket)

    async def _get(
        self,
        bucket: str,
        key: str,
        options: models.GetObjectOptions | None,
    ) -> dict[str, typing.Any]:
        options = options or models.GetObjectOptions()
        s3 = await self._client()
        response: dict[str, typing.Any] = await s3.get_object(
            Bucket=bucket, Key=key, **options.to_params()
        )
        if response.get('Body') is None:
            raise errors.StorageError(
                'Empty response body',
                errors.ErrorCode.EMPTY_BODY,
                context={'bucket': bucket, 'key': key},
            )
        return response


def _object_info(entry: dict[str, typing.Any]) -> models.ObjectInfo:
    owner = entry.get('Owner')
    return models.ObjectInfo(
        key=entry['Key'],
        last_modified=entry.get('LastModified'),
        etag=entry.get('ETag'),
        size=entry.get('Size', 0),
        storage_class=entry.get('StorageClass'),
        owner=models.Owner(
            id=owner.get('ID'), display_name=owner.get('DisplayName')
        )
        if owner
        else None,
    )
