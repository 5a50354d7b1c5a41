"""Operation groups wrapping families of S3 calls."""

from .buckets import BucketOperations
from .multipart import MultipartOperations
from .objects import ObjectOperations
from .presigned import PresignedUrlOperations

__all__ = [
    'BucketOperations',
    'MultipartOperations',
    'ObjectOperations',
    'PresignedUrlOperations',
]
