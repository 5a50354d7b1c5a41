"""Presigned URL generation."""

from fastly_storage.operations import base


class PresignedUrlOperations(base.Operations):
    """Sign time-limited URLs for direct object reads and writes.

    Signing happens locally with the configured credentials; a URL is
    generated fresh on every call.

    """

    async def get_presigned_download_url(
        self,
        bucket: str,
        key: str,
        expires_in: int,
    ) -> str:
        """Generate a presigned GET URL for an object.

        Args:
            bucket: Bucket name
            key: Object key
            expires_in: URL lifetime in seconds

        Returns:
            Presigned URL string

        """
        return await self._presign(
            'get_object', bucket, key, expires_in, 'get_presigned_download_url'
        )

    async def get_presigned_upload_url(
        self,
        bucket: str,
        key: str,
        expires_in: int,
    ) -> str:
        """Generate a presigned PUT URL for an object.

        Args:
            bucket: Bucket name
            key: Object key
            expires_in: URL lifetime in seconds

        Returns:
            Presigned URL string

        """
        return await self._presign(
            'put_object', bucket, key, expires_in, 'get_presigned_upload_url'
        )

    async def _presign(
        self,
        client_method: str,
        bucket: str,
        key: str,
        expires_in: int,
        operation: str,
    ) -> str:
        self.logger.debug(
            'Generating presigned %s URL for %s/%s', client_method, bucket, key
        )
        try:
            s3 = await self._client()
            url: str = await s3.generate_presigned_url(
                client_method,
                Params={'Bucket': bucket, 'Key': key},
                ExpiresIn=expires_in,
            )
        except Exception as err:
            raise self._failure(
                'Failed to generate presigned URL',
                err,
                bucket=bucket,
                key=key,
                operation=operation,
            )
        self.logger.debug(
            'Generated presigned %s URL for %s/%s (expires in %ds)',
            client_method,
            bucket,
            key,
            expires_in,
        )
        return url
