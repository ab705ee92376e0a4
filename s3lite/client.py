"""Client handle and object operations.

An :class:`S3Client` binds an immutable :class:`ClientConfig` to an HTTP
transport. :class:`S3Object` handles share that client by reference and
never modify it, so handles can be used from independent threads.
"""

import logging
from datetime import timedelta
from typing import Any, Mapping, Optional, Union

import httpx

from s3lite import presign
from s3lite.canonical import clean_key, escape_key
from s3lite.errors import S3Error
from s3lite.models import ACL, ClientConfig, ObjectHead, Policy
from s3lite.multipart import DEFAULT_PART_SIZE, MultipartWriter
from s3lite.s3_client import build_s3_client
from s3lite.signing import http_date, sign_request

logger = logging.getLogger(__name__)


class S3Client:
    """Handle on a single bucket.

    Can be used as a context manager to close an owned HTTP client.
    """

    def __init__(
        self,
        config: ClientConfig,
        http_client: Optional[httpx.Client] = None,
        s3_client: Any = None,
    ):
        """Initialize the client.

        Args:
            config: Bucket scope and credentials
            http_client: httpx client used as transport; one is created
                         and owned by this handle when omitted
            s3_client: boto3 S3 client for multipart uploads; built from
                       ``config`` on first use when omitted
        """
        self.config = config
        self._owns_http_client = http_client is None
        self.http_client = http_client if http_client is not None else httpx.Client()
        self._s3_client = s3_client

    @property
    def s3_client(self) -> Any:
        if self._s3_client is None:
            self._s3_client = build_s3_client(self.config)
        return self._s3_client

    def object(self, key: str) -> "S3Object":
        """Return a handle for the object stored under ``key``."""
        return S3Object(self, key)

    def url(self, path: str = "") -> httpx.URL:
        """Absolute URL for an escaped path relative to the bucket."""
        if not path.startswith("/"):
            path = "/" + path
        return httpx.URL(
            f"{self.config.scheme}://{self.config.bucket_host}"
            f"{self.config.bucket_prefix}{path}"
        )

    def request(
        self,
        method: str,
        path: str,
        expect_code: int,
        params: Optional[Mapping[str, str]] = None,
    ) -> httpx.Response:
        """Sign and send a request, checking the response status.

        Args:
            method: HTTP method
            path: Escaped path relative to the bucket
            expect_code: Required status code, or 0 to accept any status
            params: Optional query parameters

        Returns:
            The streamed response. The caller is responsible for closing it.

        Raises:
            S3Error: If ``expect_code`` is non-zero and the status differs.
                     The response body is consumed and closed.
            httpx.TransportError: If no response was obtained.
        """
        request = self.http_client.build_request(
            method,
            self.url(path),
            params=params,
            headers={"Date": http_date()},
        )
        sign_request(request, self.config)
        logger.debug("%s %s", request.method, request.url)

        response = self.http_client.send(request, stream=True)
        if expect_code != 0 and response.status_code != expect_code:
            raise S3Error.from_response(response)
        return response

    def close(self) -> None:
        if self._owns_http_client:
            self.http_client.close()

    def __enter__(self) -> "S3Client":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False


class S3Object:
    """Reference to a single object in the client's bucket."""

    def __init__(self, client: S3Client, key: str):
        self.client = client
        self.key = clean_key(key)

    def __repr__(self) -> str:
        return f"<S3Object {self.client.config.bucket_name}/{self.key}>"

    @property
    def path(self) -> str:
        """Escaped path of the object relative to the bucket."""
        return "/" + escape_key(self.key)

    def exists(self) -> bool:
        """Test whether the object exists (HEAD returns 200)."""
        response = self.client.request("HEAD", self.path, 0)
        response.close()
        return response.status_code == 200

    def head(self) -> ObjectHead:
        """Fetch the object's metadata.

        Raises:
            S3Error: If the status is not 200.
        """
        response = self.client.request("HEAD", self.path, 0)
        response.close()
        if response.status_code != 200:
            raise S3Error(response.status_code, response.reason_phrase)
        return ObjectHead(response.headers)

    def delete(self) -> None:
        """Delete the object. The store answers 204 whether or not it existed."""
        self.client.request("DELETE", self.path, 204).close()

    def reader(self) -> tuple[httpx.Response, httpx.Headers]:
        """Open the object for reading.

        Returns:
            Tuple of (streamed response, headers). Read the body with
            ``response.iter_bytes()`` or ``response.read()`` and close the
            response when done.
        """
        response = self.client.request("GET", self.path, 200)
        return response, response.headers

    def writer(self, part_size: int = DEFAULT_PART_SIZE) -> MultipartWriter:
        """Open the object for writing through a multipart upload.

        Nothing is visible in the store until the writer is closed.
        """
        writer = MultipartWriter(
            self.client.s3_client,
            self.client.config.bucket_name,
            self.key,
            part_size=part_size,
        )
        writer.initiate()
        return writer

    def authenticated_url(
        self,
        secure: bool = True,
        method: str = "GET",
        expires_in: Union[int, float, timedelta] = 3600,
    ) -> httpx.URL:
        """Generate a pre-signed URL granting time-limited access."""
        return presign.authenticated_url(
            self.client.config, self.key, secure, method, expires_in
        )

    def form_upload_url(
        self,
        acl: Union[ACL, str],
        policy: Union[Policy, Mapping[str, Any]],
        *extra_fields: presign.FormFields,
    ) -> httpx.URL:
        """Sign an upload policy for a browser form upload to this key."""
        return presign.form_upload_url(
            self.client.config, self.key, acl, policy, *extra_fields
        )
