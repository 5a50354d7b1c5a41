"""Multipart upload operations.

Each upload started through :class:`MultipartOperations` is tracked in
memory by its upload id so later calls only need the id. The tracking
is local to the process: uploads begun before a restart are unknown
here and have to be listed and aborted through the backend directly.

"""

import datetime
import typing

from fastly_storage import connection, errors, models
from fastly_storage import logger as logger_
from fastly_storage.operations import base


class MultipartOperations(base.Operations):
    """Create, fill, complete and abort multipart uploads."""

    def __init__(
        self,
        s3: connection.S3Connection,
        logger: logger_.Logger,
        session_ttl: datetime.timedelta | None = None,
    ) -> None:
        super().__init__(s3, logger)
        self.session_ttl = session_ttl
        self._sessions: dict[str, models.MultipartSession] = {}

    def sessions(self) -> list[models.MultipartSession]:
        """Return the uploads currently tracked, oldest first."""
        return sorted(self._sessions.values(), key=lambda s: s.created_at)

    def prune_sessions(
        self, max_age: datetime.timedelta
    ) -> list[models.MultipartSession]:
        """Stop tracking uploads older than ``max_age``.

        Only the local record is dropped; the upload itself is left on
        the backend.

        Returns:
            The sessions that were removed

        """
        cutoff = datetime.datetime.now(datetime.UTC) - max_age
        expired = [
            session
            for session in self._sessions.values()
            if session.created_at < cutoff
        ]
        for session in expired:
            del self._sessions[session.upload_id]
            self.logger.warning(
                'Dropped stale multipart upload %s for %s/%s',
                session.upload_id,
                session.bucket,
                session.key,
            )
        return expired

    async def create_multipart_upload(
        self,
        bucket: str,
        key: str,
        options: models.UploadObjectOptions | None = None,
    ) -> models.MultipartUploadResult:
        """Start a multipart upload and begin tracking it.

        Raises:
            StorageError: ``NoUploadId`` if the backend omits the id.

        """
        if self.session_ttl is not None:
            self.prune_sessions(self.session_ttl)

        options = options or models.UploadObjectOptions()
        self.logger.info('Creating multipart upload %s/%s', bucket, key)
        try:
            s3 = await self._client()
            response = await s3.create_multipart_upload(
                Bucket=bucket, Key=key, **options.to_params()
            )
            upload_id = response.get('UploadId')
            if not upload_id:
                raise errors.StorageError(
                    'No upload ID returned',
                    errors.ErrorCode.NO_UPLOAD_ID,
                    context={'bucket': bucket, 'key': key},
                )
        except Exception as err:
            raise self._failure(
                'Failed to create multipart upload',
                err,
                bucket=bucket,
                key=key,
                operation='create_multipart_upload',
            )

        self._sessions[upload_id] = models.MultipartSession(
            upload_id=upload_id, bucket=bucket, key=key
        )
        self.logger.info(
            'Created multipart upload %s for %s/%s', upload_id, bucket, key
        )
        return models.MultipartUploadResult(
            upload_id=upload_id, bucket=bucket, key=key
        )

    async def upload_part(
        self,
        upload_id: str,
        part_number: int,
        data: bytes,
    ) -> models.UploadPartResult:
        """Upload one part of a tracked multipart upload.

        Part numbers (1 to 10000) are assigned by the caller and checked
        by the backend.

        Raises:
            StorageError: ``UploadNotFound`` for an untracked id,
                ``NoEtag`` if the backend omits the part's ETag.

        """
        session = self._session(upload_id)
        self.logger.debug(
            'Uploading part %d of %s (%d bytes)',
            part_number,
            upload_id,
            len(data),
        )
        try:
            s3 = await self._client()
            response = await s3.upload_part(
                Bucket=session.bucket,
                Key=session.key,
                UploadId=upload_id,
                PartNumber=part_number,
                Body=data,
            )
            etag = response.get('ETag')
            if not etag:
                raise errors.StorageError(
                    'No ETag returned',
                    errors.ErrorCode.NO_ETAG,
                    context={
                        'upload_id': upload_id,
                        'part_number': part_number,
                    },
                )
        except Exception as err:
            raise self._failure(
                'Failed to upload part',
                err,
                upload_id=upload_id,
                part_number=part_number,
                operation='upload_part',
            )
        self.logger.debug(
            'Uploaded part %d of %s (etag %s)', part_number, upload_id, etag
        )
        return models.UploadPartResult(part_number=part_number, etag=etag)

    async def complete_multipart_upload(
        self,
        upload_id: str,
        parts: typing.Sequence[models.UploadPart],
    ) -> models.UploadResult:
        """Assemble the uploaded parts into the final object.

        The parts are sent in the order given; the caller is responsible
        for supplying every part. Tracking stops once the backend
        confirms completion.

        Raises:
            StorageError: ``UploadNotFound`` for an untracked id.

        """
        session = self._session(upload_id)
        self.logger.info(
            'Completing multipart upload %s (%d parts)',
            upload_id,
            len(parts),
        )
        try:
            s3 = await self._client()
            response = await s3.complete_multipart_upload(
                Bucket=session.bucket,
                Key=session.key,
                UploadId=upload_id,
                MultipartUpload={
                    'Parts': [
                        {'PartNumber': part.part_number, 'ETag': part.etag}
                        for part in parts
                    ],
                },
            )
        except Exception as err:
            raise self._failure(
                'Failed to complete multipart upload',
                err,
                upload_id=upload_id,
                operation='complete_multipart_upload',
            )

        self._sessions.pop(upload_id, None)
        self.logger.info(
            'Completed multipart upload %s (%s)',
            upload_id,
            response.get('Location'),
        )
        return models.UploadResult(
            etag=response.get('ETag'),
            version_id=response.get('VersionId'),
            location=response.get('Location'),
        )

    async def abort_multipart_upload(self, upload_id: str) -> None:
        """Abort a tracked multipart upload and stop tracking it.

        Raises:
            StorageError: ``UploadNotFound`` for an untracked id.

        """
        session = self._session(upload_id)
        self.logger.info('Aborting multipart upload %s', upload_id)
        try:
            s3 = await self._client()
            await s3.abort_multipart_upload(
                Bucket=session.bucket,
                Key=session.key,
                UploadId=upload_id,
            )
        except Exception as err:
            raise self._failure(
                'Failed to abort multipart upload',
                err,
                upload_id=upload_id,
                operation='abort_multipart_upload',
            )

        self._sessions.pop(upload_id, None)
        self.logger.info('Aborted multipart upload %s', upload_id)

    def _session(self, upload_id: str) -> models.MultipartSession:
        try:
            return self._sessions[upload_id]
        except KeyError:
            raise errors.StorageError(
                'Upload ID not found',
                errors.ErrorCode.UPLOAD_NOT_FOUND,
                context={'upload_id': upload_id},
            ) from None
