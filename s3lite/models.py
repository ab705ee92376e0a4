"""Data models for s3lite."""

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from enum import Enum
from typing import Any, Mapping

from s3lite.errors import BucketNameError, ConfigError

DEFAULT_ENDPOINT = "s3.amazonaws.com"
DEFAULT_REGION = "us-east-1"
ADDRESSING_STYLES = ("virtual", "path")

# DNS-compatible bucket names: usable as a host label in virtual style
_BUCKET_NAME_RE = re.compile(r"^[a-z0-9][a-z0-9.-]{1,61}[a-z0-9]$")
_IPV4_RE = re.compile(r"^\d{1,3}(\.\d{1,3}){3}$")


class ACL(str, Enum):
    """Canned access control levels applied to an object at write time."""

    PRIVATE = "private"
    PUBLIC_READ = "public-read"
    PUBLIC_READ_WRITE = "public-read-write"
    AUTHENTICATED_READ = "authenticated-read"
    BUCKET_OWNER_READ = "bucket-owner-read"
    BUCKET_OWNER_FULL_CONTROL = "bucket-owner-full-control"


@dataclass(frozen=True)
class Credentials:
    """Access key pair. The secret is only ever used as a MAC key."""

    access_key_id: str
    secret_access_key: str = field(repr=False)


def validate_bucket_name(name: str) -> None:
    """Check that a bucket name can be used as a host label.

    Raises:
        BucketNameError: If the name is not DNS-compatible.
    """
    if not _BUCKET_NAME_RE.match(name or ""):
        raise BucketNameError(
            f"Invalid bucket name {name!r}: must be 3-63 characters of "
            "lowercase letters, digits, dots and hyphens, starting and "
            "ending with a letter or digit"
        )
    if ".." in name or ".-" in name or "-." in name:
        raise BucketNameError(f"Invalid bucket name {name!r}: malformed label")
    if _IPV4_RE.match(name):
        raise BucketNameError(
            f"Invalid bucket name {name!r}: must not be an IP address"
        )


@dataclass(frozen=True)
class ClientConfig:
    """Immutable client scope shared by every object handle."""

    bucket_name: str
    credentials: Credentials
    endpoint: str = DEFAULT_ENDPOINT
    addressing_style: str = "virtual"
    secure: bool = True
    region_name: str = DEFAULT_REGION

    def __post_init__(self):
        validate_bucket_name(self.bucket_name)
        if self.addressing_style not in ADDRESSING_STYLES:
            raise ConfigError(
                f"Invalid addressing style {self.addressing_style!r}, "
                f"expected one of: {', '.join(ADDRESSING_STYLES)}"
            )
        if not self.endpoint or "/" in self.endpoint:
            raise ConfigError(
                f"Invalid endpoint {self.endpoint!r}: expected a bare host name"
            )

    @property
    def scheme(self) -> str:
        return "https" if self.secure else "http"

    @property
    def bucket_host(self) -> str:
        """Host serving the bucket in the configured addressing style."""
        if self.addressing_style == "virtual":
            return f"{self.bucket_name}.{self.endpoint}"
        return self.endpoint

    @property
    def bucket_prefix(self) -> str:
        """URL path prefix before the object key."""
        if self.addressing_style == "path":
            return f"/{self.bucket_name}"
        return ""


class ObjectHead:
    """Object metadata returned by a HEAD request."""

    def __init__(self, headers: Mapping[str, str]):
        self.headers = headers

    def _get_date(self, name: str) -> datetime:
        value = self.headers.get(name)
        if not value:
            raise ValueError(f"Missing {name} header")
        return parsedate_to_datetime(value)

    def date(self) -> datetime:
        return self._get_date("Date")

    def last_modified(self) -> datetime:
        return self._get_date("Last-Modified")

    def etag(self) -> str:
        return self.headers.get("ETag", "")

    def content_length(self) -> int:
        return int(self.headers.get("Content-Length", ""))

    def content_type(self) -> str:
        return self.headers.get("Content-Type", "")


@dataclass
class Policy:
    """Browser upload policy document.

    Conditions are passed through as-is, for example
    ``{"bucket": "media"}`` or ``["starts-with", "$key", "uploads/"]``.
    """

    expiration: datetime
    conditions: list[Any] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        expiration = self.expiration
        if expiration.tzinfo is not None:
            expiration = expiration.astimezone(timezone.utc)
        return {
            "expiration": expiration.strftime("%Y-%m-%dT%H:%M:%S.000Z"),
            "conditions": list(self.conditions),
        }
