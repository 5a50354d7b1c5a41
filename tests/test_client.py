import datetime
import os
import unittest
from unittest import mock

import pydantic

from fastly_storage import client, connection, errors, logger, models
from tests import base


class LoadSettingsTestCase(unittest.TestCase):
    """Test cases for configuration resolution."""

    def test_overrides_win(self) -> None:
        """Test that explicit values override the given settings."""
        config = client.load_settings(
            base.make_settings(), region='eu-central', timeout=None
        )
        self.assertEqual(config.region, 'eu-central')
        self.assertEqual(config.timeout, 30000)
        self.assertEqual(config.endpoint, 'https://storage.example.com')

    def test_config_returned_unchanged(self) -> None:
        """Test that settings without overrides are reused as-is."""
        config = base.make_settings()
        self.assertIs(client.load_settings(config), config)

    def test_environment(self) -> None:
        """Test that explicit values win over the environment."""
        env = {
            'FASTLY_ENDPOINT': 'https://env.example.com',
            'FASTLY_ACCESS_KEY_ID': 'env-key',
            'FASTLY_SECRET_ACCESS_KEY': 'env-secret',
        }
        with mock.patch.dict(os.environ, env, clear=True):
            config = client.load_settings(access_key_id='explicit')
        self.assertEqual(config.endpoint, 'https://env.example.com')
        self.assertEqual(config.access_key_id, 'explicit')

    def test_non_positive_session_ttl(self) -> None:
        """Test that a zero session TTL is reported as InvalidConfig."""
        env = {'FASTLY_MULTIPART_SESSION_TTL': '0'}
        with mock.patch.dict(os.environ, env, clear=True):
            with self.assertRaises(errors.StorageError) as ctx:
                client.load_settings()
        self.assertEqual(ctx.exception.code, 'InvalidConfig')
        self.assertEqual(
            ctx.exception.context, {'field': 'multipart_session_ttl'}
        )

    def test_unparseable_environment_value(self) -> None:
        """Test that a bad environment value raises InvalidConfig."""
        env = {'FASTLY_MAX_RETRIES': 'many'}
        with mock.patch.dict(os.environ, env, clear=True):
            with self.assertRaises(errors.StorageError) as ctx:
                client.load_settings()
        self.assertEqual(ctx.exception.code, 'InvalidConfig')
        self.assertEqual(ctx.exception.context, {'field': 'max_retries'})
        self.assertIsInstance(
            ctx.exception.__cause__, pydantic.ValidationError
        )


class StorageClientConfigTestCase(unittest.TestCase):
    """Test cases for configuration checks at construction."""

    def test_missing_required_values(self) -> None:
        """Test that missing credentials fail before connecting."""
        for field, env_var in (
            ('endpoint', 'FASTLY_ENDPOINT'),
            ('access_key_id', 'FASTLY_ACCESS_KEY_ID'),
            ('secret_access_key', 'FASTLY_SECRET_ACCESS_KEY'),
        ):
            with self.subTest(field=field):
                with mock.patch.object(connection, 'S3Connection') as conn:
                    with self.assertRaises(errors.StorageError) as ctx:
                        client.StorageClient(
                            base.make_settings(**{field: ''})
                        )
                conn.assert_not_called()
                self.assertEqual(ctx.exception.code, 'InvalidConfig')
                self.assertEqual(ctx.exception.context, {'field': field})
                self.assertIn(env_var, ctx.exception.message)

    def test_invalid_endpoint(self) -> None:
        """Test that a malformed endpoint fails before connecting."""
        with mock.patch.object(connection, 'S3Connection') as conn:
            with self.assertRaises(errors.StorageError) as ctx:
                client.StorageClient(base.make_settings(endpoint='nope'))
        conn.assert_not_called()
        self.assertEqual(ctx.exception.code, 'InvalidConfig')

    def test_overrides_applied(self) -> None:
        """Test that keyword overrides reach the client settings."""
        storage = client.StorageClient(
            base.make_settings(), region='eu-central', max_retries=0
        )
        self.assertEqual(storage.config.region, 'eu-central')
        self.assertEqual(storage.config.max_retries, 0)

    def test_debug_logger(self) -> None:
        """Test that the debug setting reaches the default logger."""
        with mock.patch.object(logger, 'DefaultLogger') as default_logger:
            client.StorageClient(base.make_settings(debug=True))
        default_logger.assert_called_once_with(True)

    def test_custom_logger(self) -> None:
        """Test that a supplied logger receives the init message."""
        custom = mock.Mock(spec=logger.Logger)
        client.StorageClient(base.make_settings(), logger=custom)
        custom.info.assert_called_once()

    def test_session_ttl(self) -> None:
        """Test that the session TTL is converted to a timedelta."""
        storage = client.StorageClient(
            base.make_settings(multipart_session_ttl=600)
        )
        self.assertEqual(
            storage._multipart.session_ttl, datetime.timedelta(minutes=10)
        )


class StorageClientTestCase(base.ClientTestCase):
    """Test cases for the StorageClient facade."""

    async def test_bucket_and_object_lifecycle(self) -> None:
        """Test the create, upload, download and delete scenario."""
        with self.assertRaises(errors.StorageError) as ctx:
            await self.client.create_bucket('ab')
        self.assertEqual(ctx.exception.code, 'InvalidBucketName')
        self.s3.create_bucket.assert_not_awaited()

        await self.client.create_bucket('valid-bucket')
        self.s3.create_bucket.assert_awaited_once()

        data = bytes(range(256))
        self.s3.put_object.return_value = {'ETag': '"abc"'}
        self.s3.get_object.return_value = {
            'Body': base.StreamingBody(data),
            'ETag': '"abc"',
            'ContentLength': len(data),
            'ContentType': 'application/octet-stream',
        }
        uploaded = await self.client.upload_object(
            'valid-bucket', 'k', data
        )
        downloaded = await self.client.get_object('valid-bucket', 'k')
        self.assertEqual(downloaded.body, data)
        self.assertEqual(downloaded.etag, uploaded.etag)
        self.assertEqual(downloaded.content_length, len(data))

        self.s3.delete_bucket.side_effect = base.client_error(
            'BucketNotEmpty', 409, 'DeleteBucket'
        )
        with self.assertRaises(errors.StorageError) as ctx:
            await self.client.delete_bucket('valid-bucket')
        self.assertEqual(ctx.exception.code, 'BucketNotEmpty')
        self.assertEqual(ctx.exception.status_code, 409)
        self.assertEqual(ctx.exception.context['bucket'], 'valid-bucket')

    async def test_object_validation_before_request(self) -> None:
        """Test that bad names and keys never reach the backend."""
        calls = (
            lambda: self.client.upload_object('bucket', '', b'x'),
            lambda: self.client.get_object('Bad_Bucket', 'key'),
            lambda: self.client.get_object_stream('bucket', 'k' * 1025),
            lambda: self.client.delete_object('bucket', ''),
            lambda: self.client.head_object('a', 'key'),
            lambda: self.client.copy_object('bucket', 'key', 'bucket', ''),
            lambda: self.client.list_objects('bucket..name'),
            lambda: self.client.create_multipart_upload('bucket', ''),
            lambda: self.client.get_presigned_download_url('b', 'key'),
            lambda: self.client.get_presigned_upload_url('bucket', ''),
            lambda: self.client.get_bucket_info(''),
        )
        for call in calls:
            with self.assertRaises(errors.StorageError) as ctx:
                await call()
            self.assertIn(
                ctx.exception.code, ('InvalidBucketName', 'InvalidObjectKey')
            )
        self.assertEqual(self.s3.mock_calls, [])

    async def test_iter_objects_validates_eagerly(self) -> None:
        """Test that iter_objects validates before iterating."""
        with self.assertRaises(errors.StorageError) as ctx:
            self.client.iter_objects('-bucket')
        self.assertEqual(ctx.exception.code, 'InvalidBucketName')

    async def test_keyword_options(self) -> None:
        """Test that keyword options merge with an options model."""
        self.s3.put_object.return_value = {'ETag': '"abc"'}
        await self.client.upload_object(
            'bucket',
            'key',
            b'data',
            models.UploadObjectOptions(content_type='text/plain'),
            cache_control='no-cache',
        )
        self.s3.put_object.assert_awaited_once_with(
            Bucket='bucket',
            Key='key',
            Body=b'data',
            ContentType='text/plain',
            CacheControl='no-cache',
        )

    async def test_unknown_option(self) -> None:
        """Test that a misspelled option is rejected."""
        with self.assertRaises(pydantic.ValidationError):
            await self.client.upload_object(
                'bucket', 'key', b'data', content_typ='text/plain'
            )
        self.s3.put_object.assert_not_awaited()

    async def test_list_objects_pages(self) -> None:
        """Test that continuation tokens drive manual paging."""
        self.s3.list_objects_v2.side_effect = [
            {
                'Name': 'bucket',
                'Contents': [{'Key': 'a', 'Size': 1}],
                'IsTruncated': True,
                'NextContinuationToken': 'token-1',
                'KeyCount': 1,
            },
            {
                'Name': 'bucket',
                'Contents': [{'Key': 'b', 'Size': 2}],
                'IsTruncated': False,
                'KeyCount': 1,
            },
        ]
        keys = []
        token = None
        while True:
            page = await self.client.list_objects(
                'bucket', max_keys=1, continuation_token=token
            )
            keys.extend(entry.key for entry in page.contents)
            if not page.is_truncated:
                break
            token = page.next_continuation_token
        self.assertEqual(keys, ['a', 'b'])
        self.assertEqual(
            self.s3.list_objects_v2.await_args_list[1].kwargs,
            {
                'Bucket': 'bucket',
                'MaxKeys': 1,
                'ContinuationToken': 'token-1',
            },
        )

    async def test_multipart_upload(self) -> None:
        """Test a full multipart upload through the client."""
        self.s3.create_multipart_upload.return_value = {'UploadId': 'up-1'}
        self.s3.upload_part.side_effect = [{'ETag': '"1"'}, {'ETag': '"2"'}]
        self.s3.complete_multipart_upload.return_value = {'ETag': '"all"'}

        upload = await self.client.create_multipart_upload('bucket', 'big')
        self.assertEqual(
            [s.upload_id for s in self.client.multipart_sessions()],
            ['up-1'],
        )
        first = await self.client.upload_part(upload.upload_id, 1, b'a')
        second = await self.client.upload_part(upload.upload_id, 2, b'b')
        result = await self.client.complete_multipart_upload(
            upload.upload_id,
            [first, models.UploadPart(part_number=2, etag=second.etag)],
        )

        self.assertEqual(result.etag, '"all"')
        self.assertEqual(
            self.s3.complete_multipart_upload.await_args.kwargs[
                'MultipartUpload'
            ],
            {
                'Parts': [
                    {'PartNumber': 1, 'ETag': '"1"'},
                    {'PartNumber': 2, 'ETag': '"2"'},
                ],
            },
        )
        self.assertEqual(self.client.multipart_sessions(), [])

    async def test_prune_multipart_sessions(self) -> None:
        """Test that stale multipart sessions can be pruned."""
        self.s3.create_multipart_upload.return_value = {'UploadId': 'up-1'}
        await self.client.create_multipart_upload('bucket', 'big')
        self.assertEqual(
            self.client.prune_multipart_sessions(datetime.timedelta(hours=1)),
            [],
        )
        pruned = self.client.prune_multipart_sessions(
            datetime.timedelta(0)
        )
        self.assertEqual([s.upload_id for s in pruned], ['up-1'])

    async def test_presigned_urls(self) -> None:
        """Test that presigned URLs default to one hour."""
        self.s3.generate_presigned_url = mock.AsyncMock(
            return_value='https://signed'
        )
        url = await self.client.get_presigned_download_url('bucket', 'key')
        self.assertEqual(url, 'https://signed')
        self.s3.generate_presigned_url.assert_awaited_once_with(
            'get_object',
            Params={'Bucket': 'bucket', 'Key': 'key'},
            ExpiresIn=3600,
        )

    async def test_destroy(self) -> None:
        """Test that destroy closes the connection."""
        await self.client.destroy()
        self.assertTrue(self.client._connection.closed)


class StorageClientContextManagerTestCase(unittest.IsolatedAsyncioTestCase):
    """Test cases for using the client as an async context manager."""

    async def test_context_manager_destroys(self) -> None:
        """Test that leaving the context closes the client."""
        async with client.StorageClient(base.make_settings()) as storage:
            self.assertFalse(storage._connection.closed)
        self.assertTrue(storage._connection.closed)
        with self.assertRaises(errors.StorageError) as ctx:
            await storage._connection.client()
        self.assertEqual(ctx.exception.code, 'ClientClosed')
