"""
s3lite: a small client for S3-compatible object stores.

Signs requests with the S3 HMAC-SHA1 scheme, generates time-limited
pre-signed URLs and signs browser form-upload policies.
"""

__version__ = "1.0.0"

from s3lite.client import S3Client, S3Object
from s3lite.errors import (
    BucketNameError,
    ConfigError,
    PolicyError,
    S3Error,
    S3LiteError,
)
from s3lite.models import ACL, ClientConfig, Credentials, ObjectHead, Policy

__all__ = [
    "ACL",
    "BucketNameError",
    "ClientConfig",
    "ConfigError",
    "Credentials",
    "ObjectHead",
    "Policy",
    "PolicyError",
    "S3Client",
    "S3Error",
    "S3LiteError",
    "S3Object",
    "__version__",
]
