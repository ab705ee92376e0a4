"""Signature primitive and header-based request signing.

Requests are signed with the S3 HMAC-SHA1 scheme: a five-line
string-to-sign is built from the request and its MAC is sent as
``Authorization: AWS {AccessKeyId}:{Signature}``.
"""

import base64
import hashlib
import hmac
import logging
from email.utils import formatdate

import httpx

from s3lite.canonical import canonical_query, canonical_resource
from s3lite.models import ClientConfig

logger = logging.getLogger(__name__)


def sign(secret: str, message: str) -> str:
    """Return the base64-encoded HMAC-SHA1 of ``message`` keyed by ``secret``."""
    digest = hmac.new(
        secret.encode("utf-8"),
        message.encode("utf-8"),
        hashlib.sha1,
    ).digest()
    return base64.b64encode(digest).decode("ascii")


def string_to_sign(
    method: str,
    content_md5: str,
    content_type: str,
    date: str,
    resource: str,
) -> str:
    """Join the five signed fields. Unset fields are empty strings."""
    return "\n".join([method.strip(), content_md5, content_type, date, resource])


def http_date() -> str:
    """Current time in RFC 1123 format, e.g. ``Tue, 27 Mar 2007 19:36:42 GMT``."""
    return formatdate(usegmt=True)


def _object_path(request: httpx.Request, config: ClientConfig) -> str:
    path = request.url.raw_path.split(b"?", 1)[0].decode("ascii")
    prefix = config.bucket_prefix
    if prefix and path.startswith(prefix):
        path = path[len(prefix):]
    return path


def sign_request(request: httpx.Request, config: ClientConfig) -> httpx.Request:
    """Sign a pending request in place.

    Sets the Date header when missing, rewrites the query string into
    canonical order and adds the Authorization header. The query must not
    be modified after signing: the signature covers the exact bytes sent.

    Args:
        request: The request to sign.
        config: Client scope providing the bucket and credentials.

    Returns:
        The same request, for chaining.
    """
    if "Date" not in request.headers:
        request.headers["Date"] = http_date()

    query = canonical_query(request.url.params.multi_items())
    if query:
        request.url = request.url.copy_with(query=query.encode("ascii"))

    resource = canonical_resource(
        config.bucket_name, _object_path(request, config), query
    )
    to_sign = string_to_sign(
        request.method,
        request.headers.get("Content-MD5", ""),
        request.headers.get("Content-Type", ""),
        request.headers["Date"],
        resource,
    )
    logger.debug("String to sign: %r", to_sign)

    signature = sign(config.credentials.secret_access_key, to_sign)
    request.headers["Authorization"] = (
        f"AWS {config.credentials.access_key_id}:{signature}"
    )
    return request
