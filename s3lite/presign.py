"""Pre-signed URLs and browser form-upload policies.

Both produce URLs that carry their authorization in the query string, so
they can be handed to a third party without sharing credentials.
"""

import base64
import json
import logging
import math
import time
from datetime import timedelta
from typing import Any, Mapping, Sequence, Union

import httpx

from s3lite.canonical import escape_key
from s3lite.errors import PolicyError
from s3lite.models import ACL, ClientConfig, Policy
from s3lite.signing import sign

logger = logging.getLogger(__name__)

FormFields = Mapping[str, Union[str, Sequence[str]]]


def expires_at(expires_in: Union[int, float, timedelta]) -> int:
    """Unix timestamp ``expires_in`` from now. Negative values are allowed."""
    if isinstance(expires_in, timedelta):
        expires_in = expires_in.total_seconds()
    return math.floor(time.time() + expires_in)


def authenticated_url(
    config: ClientConfig,
    key: str,
    secure: bool = True,
    method: str = "GET",
    expires_in: Union[int, float, timedelta] = 3600,
) -> httpx.URL:
    """Generate a pre-signed URL for an object.

    The URL is path-style on the configured endpoint so that its path is
    exactly the ``/{bucket}/{key}`` resource that was signed.

    Args:
        config: Client scope providing the bucket and credentials.
        key: Cleaned (unescaped) object key.
        secure: Use https when True, http otherwise.
        method: HTTP method the URL authorizes.
        expires_in: Lifetime in seconds or as a timedelta. Not validated:
                    zero or negative lifetimes produce an expired URL.

    Returns:
        URL carrying ``AWSAccessKeyId``, ``Expires`` and ``Signature``.
    """
    escaped = escape_key(key)
    expires = str(expires_at(expires_in))
    to_sign = f"{method}\n\n\n{expires}\n/{config.bucket_name}/{escaped}"
    logger.debug("String to sign: %r", to_sign)

    signature = sign(config.credentials.secret_access_key, to_sign).strip()

    scheme = "https" if secure else "http"
    return httpx.URL(
        f"{scheme}://{config.endpoint}/{config.bucket_name}/{escaped}",
        params=[
            ("AWSAccessKeyId", config.credentials.access_key_id),
            ("Expires", expires),
            ("Signature", signature),
        ],
    )


def encode_policy(policy: Union[Policy, Mapping[str, Any]]) -> str:
    """Serialize a policy document to base64-encoded JSON.

    Raises:
        PolicyError: If the document is not JSON-serializable.
    """
    if isinstance(policy, Policy):
        policy = policy.to_dict()
    try:
        document = json.dumps(policy, separators=(",", ":"))
    except (TypeError, ValueError) as e:
        raise PolicyError(f"Policy is not JSON-serializable: {e}") from e
    return base64.b64encode(document.encode("utf-8")).decode("ascii")


def form_upload_url(
    config: ClientConfig,
    key: str,
    acl: Union[ACL, str],
    policy: Union[Policy, Mapping[str, Any]],
    *extra_fields: FormFields,
) -> httpx.URL:
    """Sign an upload policy for a direct browser-to-store upload.

    The returned URL points at the bucket root. Its query parameters are
    the complete set of form fields: ``AWSAccessKeyId``, ``acl``, ``key``,
    ``signature`` and ``policy``, followed by any extra fields. Extra
    fields are appended, never replacing a signed field, and are not
    covered by the signature.

    Raises:
        PolicyError: If the policy document is not JSON-serializable.
    """
    policy64 = encode_policy(policy)
    signature = sign(config.credentials.secret_access_key, policy64)

    params = [
        ("AWSAccessKeyId", config.credentials.access_key_id),
        ("acl", acl.value if isinstance(acl, ACL) else acl),
        ("key", key),
        ("signature", signature),
        ("policy", policy64),
    ]
    for fields in extra_fields:
        for name, values in fields.items():
            if isinstance(values, str):
                values = [values]
            for value in values:
                params.append((name, value))

    return httpx.URL(
        f"{config.scheme}://{config.bucket_host}{config.bucket_prefix}/",
        params=params,
    )
