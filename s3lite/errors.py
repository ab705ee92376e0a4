"""Exception hierarchy for s3lite.

Transport failures are not wrapped: they surface as the ``httpx``
exception raised by the HTTP client.
"""

from typing import Optional
from xml.etree import ElementTree

import httpx


class S3LiteError(Exception):
    """Base class for all errors raised by s3lite."""

    pass


class ConfigError(S3LiteError):
    """Raised when configuration loading or validation fails."""

    pass


class BucketNameError(ConfigError):
    """Raised when a bucket name cannot be used to build an endpoint URL."""

    pass


class PolicyError(S3LiteError):
    """Raised when an upload policy cannot be serialized to JSON."""

    pass


class S3Error(S3LiteError):
    """Error reported by the store through an unexpected HTTP status."""

    def __init__(
        self,
        status_code: int,
        status_text: str,
        code: Optional[str] = None,
        message: Optional[str] = None,
        request_id: Optional[str] = None,
        resource: Optional[str] = None,
    ):
        self.status_code = status_code
        self.status_text = status_text
        self.code = code
        self.message = message
        self.request_id = request_id
        self.resource = resource

        parts = [f"{status_code} {status_text}".strip()]
        if code:
            parts.append(code)
        if message:
            parts.append(message)
        super().__init__(": ".join(parts))

    @classmethod
    def from_response(cls, response: httpx.Response) -> "S3Error":
        """Build an error from a response, consuming and closing it.

        Args:
            response: The response whose status did not match.

        Returns:
            S3Error populated from the status line and, when present,
            the S3 XML error document in the body.
        """
        try:
            body = response.read()
        finally:
            response.close()

        fields = _parse_error_document(body)
        return cls(
            status_code=response.status_code,
            status_text=response.reason_phrase,
            code=fields.get("Code"),
            message=fields.get("Message"),
            request_id=fields.get("RequestId"),
            resource=fields.get("Resource"),
        )


def _parse_error_document(body: bytes) -> dict[str, str]:
    if not body:
        return {}
    try:
        root = ElementTree.fromstring(body)
    except ElementTree.ParseError:
        return {}
    if root.tag != "Error":
        return {}
    return {child.tag: (child.text or "") for child in root}
