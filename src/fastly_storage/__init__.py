"""Typed async client for Fastly Object Storage.

Example::

    from fastly_storage import StorageClient

    async with StorageClient() as client:
        await client.upload_object('my-bucket', 'hello.txt', b'Hello')
        result = await client.get_object('my-bucket', 'hello.txt')

"""

from importlib import metadata

from .client import StorageClient, load_settings
from .errors import ErrorCode, StorageError
from .logger import DefaultLogger, Logger
from .models import (
    ACL,
    BucketConfig,
    BucketInfo,
    CopyObjectOptions,
    DownloadResult,
    GetObjectOptions,
    ListObjectsOptions,
    ListObjectsResult,
    MetadataDirective,
    MultipartSession,
    MultipartUploadResult,
    ObjectInfo,
    ObjectMetadata,
    Owner,
    ServerSideEncryption,
    StorageClass,
    UploadData,
    UploadObjectOptions,
    UploadPart,
    UploadPartResult,
    UploadResult,
)
from .settings import RetryPolicy, Storage

try:
    version = metadata.version('fastly-storage')
except metadata.PackageNotFoundError:  # pragma: nocover
    version = '0.0.0'

__all__ = [
    'ACL',
    'BucketConfig',
    'BucketInfo',
    'CopyObjectOptions',
    'DefaultLogger',
    'DownloadResult',
    'ErrorCode',
    'GetObjectOptions',
    'ListObjectsOptions',
    'ListObjectsResult',
    'Logger',
    'MetadataDirective',
    'MultipartSession',
    'MultipartUploadResult',
    'ObjectInfo',
    'ObjectMetadata',
    'Owner',
    'RetryPolicy',
    'ServerSideEncryption',
    'Storage',
    'StorageClass',
    'StorageClient',
    'StorageError',
    'UploadData',
    'UploadObjectOptions',
    'UploadPart',
    'UploadPartResult',
    'UploadResult',
    'load_settings',
    'version',
]
