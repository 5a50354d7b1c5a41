"""Bucket operations."""

from fastly_storage import errors, models
from fastly_storage.operations import base


class BucketOperations(base.Operations):
    """Create, delete, list and describe buckets."""

    async def create_bucket(
        self,
        name: str,
        config: models.BucketConfig | None = None,
    ) -> None:
        """Create a bucket.

        Args:
            name: Bucket name
            config: Optional ACL and region for the new bucket

        """
        config = config or models.BucketConfig()
        params = models.request_params(Bucket=name, ACL=config.acl)
        if config.region:
            # Passed through unchecked, provider-specific values included
            params['CreateBucketConfiguration'] = {
                'LocationConstraint': config.region,
            }

        self.logger.info('Creating bucket %s', name)
        try:
            s3 = await self._client()
            await s3.create_bucket(**params)
        except Exception as err:
            raise self._failure(
                'Failed to create bucket',
                err,
                bucket=name,
                operation='create_bucket',
            )
        self.logger.info('Bucket %s created', name)

    async def delete_bucket(self, name: str) -> None:
        """Delete a bucket. The backend requires it to be empty."""
        self.logger.info('Deleting bucket %s', name)
        try:
            s3 = await self._client()
            await s3.delete_bucket(Bucket=name)
        except Exception as err:
            raise self._failure(
                'Failed to delete bucket',
                err,
                bucket=name,
                operation='delete_bucket',
            )
        self.logger.info('Bucket %s deleted', name)

    async def list_buckets(self) -> list[models.BucketInfo]:
        """Return every bucket visible to the credentials."""
        self.logger.debug('Listing buckets')
        try:
            s3 = await self._client()
            response = await s3.list_buckets()
        except Exception as err:
            raise self._failure(
                'Failed to list buckets',
                err,
                operation='list_buckets',
            )

        buckets = [
            models.BucketInfo(
                name=bucket['Name'],
                creation_date=bucket.get('CreationDate'),
                region=bucket.get('BucketRegion'),
            )
            for bucket in response.get('Buckets', [])
        ]
        self.logger.debug('Listed %d buckets', len(buckets))
        return buckets

    async def get_bucket_info(self, name: str) -> models.BucketInfo:
        """Return information about one bucket.

        HEAD bucket does not report a creation date, so the bucket is
        looked up in the full bucket list after confirming it exists.

        Raises:
            StorageError: ``NotFound`` if the bucket does not exist or
                disappears between the two calls.

        """
        self.logger.debug('Getting bucket info for %s', name)
        try:
            s3 = await self._client()
            await s3.head_bucket(Bucket=name)
            buckets = await self.list_buckets()
            for bucket in buckets:
                if bucket.name == name:
                    break
            else:
                raise errors.StorageError(
                    'Bucket not found',
                    errors.ErrorCode.NOT_FOUND,
                    status_code=404,
                    context={'bucket': name},
                )
        except Exception as err:
            raise self._failure(
                'Failed to get bucket info',
                err,
                bucket=name,
                operation='get_bucket_info',
            )
        self.logger.debug('Retrieved bucket info for %s', name)
        return bucket
