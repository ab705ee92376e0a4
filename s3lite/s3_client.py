"""boto3 client factory for the multipart uploader.

The uploader drives the multipart session (create, upload part, complete,
abort) through boto3 against the same endpoint, bucket and credentials as
the signed requests made by :mod:`s3lite.client`.

Only the uploader signs with s3v4. Part uploads and completion are plain
authenticated calls with no URL handed to a third party, so they use
botocore's current S3 signer; object requests, pre-signed URLs and form
policies keep the HMAC-SHA1 scheme of :mod:`s3lite.signing`, which is
what browser forms and shared URLs against older S3-compatible stores
expect.
"""

import boto3
from botocore.client import Config

from s3lite.models import ClientConfig


def build_s3_client(config: ClientConfig):
    """Build a boto3 S3 client for the given client configuration.

    Args:
        config: Client configuration containing endpoint, credentials,
               region, and addressing style.

    Returns:
        A boto3 S3 client configured for the store.
    """
    boto_config = Config(
        signature_version="s3v4",
        s3={"addressing_style": config.addressing_style},
    )

    return boto3.client(
        "s3",
        endpoint_url=f"{config.scheme}://{config.endpoint}",
        aws_access_key_id=config.credentials.access_key_id,
        aws_secret_access_key=config.credentials.secret_access_key,
        region_name=config.region_name,
        config=boto_config,
    )
