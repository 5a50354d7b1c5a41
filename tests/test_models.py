import unittest

import pydantic

from fastly_storage import models


class RequestParamsTestCase(unittest.TestCase):
    """Test cases for building botocore request parameters."""

    def test_drops_unset_values(self) -> None:
        """Test that None values are dropped from parameters."""
        self.assertEqual(
            models.request_params(Bucket='b', Prefix=None, MaxKeys=0),
            {'Bucket': 'b', 'MaxKeys': 0},
        )

    def test_enum_values(self) -> None:
        """Test that enum members and plain strings both serialize."""
        options = models.UploadObjectOptions(
            acl=models.ACL.PUBLIC_READ,
            server_side_encryption='aws:kms',
            storage_class='DEEP_ARCHIVE',
        )
        self.assertEqual(
            options.to_params(),
            {
                'ACL': 'public-read',
                'ServerSideEncryption': 'aws:kms',
                'StorageClass': 'DEEP_ARCHIVE',
            },
        )


class OptionModelsTestCase(unittest.TestCase):
    """Test cases for the option models."""

    def test_unknown_option_rejected(self) -> None:
        """Test that every options model rejects unknown fields."""
        for model in (
            models.BucketConfig,
            models.UploadObjectOptions,
            models.GetObjectOptions,
            models.CopyObjectOptions,
            models.ListObjectsOptions,
        ):
            with self.subTest(model=model.__name__):
                with self.assertRaises(pydantic.ValidationError):
                    model(unknown=True)

    def test_empty_options(self) -> None:
        """Test that default options produce no parameters."""
        self.assertEqual(models.UploadObjectOptions().to_params(), {})
        self.assertEqual(models.ListObjectsOptions().to_params(), {})

    def test_copy_options(self) -> None:
        """Test the copy option parameters."""
        options = models.CopyObjectOptions(
            metadata_directive=models.MetadataDirective.REPLACE,
            metadata={'owner': 'team'},
        )
        self.assertEqual(
            options.to_params(),
            {'MetadataDirective': 'REPLACE', 'Metadata': {'owner': 'team'}},
        )


class ResultModelsTestCase(unittest.TestCase):
    """Test cases for the result models."""

    def test_upload_part_result_as_part(self) -> None:
        """Test converting an upload result into a part."""
        result = models.UploadPartResult(part_number=3, etag='"e"')
        self.assertEqual(
            result.as_part(), models.UploadPart(part_number=3, etag='"e"')
        )

    def test_results_are_frozen(self) -> None:
        """Test that result models cannot be modified."""
        info = models.ObjectInfo(key='a')
        with self.assertRaises(pydantic.ValidationError):
            info.key = 'b'  # type: ignore[misc]

    def test_session_created_at(self) -> None:
        """Test that sessions record a timezone-aware start time."""
        session = models.MultipartSession(
            upload_id='u', bucket='b', key='k'
        )
        self.assertIsNotNone(session.created_at.tzinfo)
