"""Streaming object writer backed by a multipart upload.

Bytes written are buffered into parts and uploaded as they fill. The
upload ends in exactly one of two ways:

- ``close()`` uploads what is left and completes the upload.
- ``abort()`` cancels the upload and discards every uploaded part.

Used as a context manager the writer aborts when the block raises and
completes otherwise.
"""

import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)

# S3 minimum part size (every part but the last)
DEFAULT_PART_SIZE = 5 * 1024 * 1024


class MultipartWriter:
    """Writable file-like object uploading to a single object key."""

    def __init__(
        self,
        s3_client: Any,
        bucket: str,
        key: str,
        part_size: int = DEFAULT_PART_SIZE,
    ):
        """Initialize the writer.

        Args:
            s3_client: boto3 S3 client
            bucket: Bucket name
            key: Cleaned (unescaped) object key
            part_size: Buffer size that triggers a part upload
        """
        if part_size < DEFAULT_PART_SIZE:
            raise ValueError(
                f"part_size must be at least {DEFAULT_PART_SIZE} bytes"
            )
        self.s3_client = s3_client
        self.bucket = bucket
        self.key = key
        self.part_size = part_size
        self.upload_id: Optional[str] = None
        self.uploaded_parts: list[dict] = []
        self._buffer = bytearray()
        self._finished = False

    @property
    def closed(self) -> bool:
        return self._finished

    def initiate(self) -> str:
        """Start the multipart session.

        Returns:
            The upload ID.
        """
        if self.upload_id is None:
            response = self.s3_client.create_multipart_upload(
                Bucket=self.bucket,
                Key=self.key,
            )
            self.upload_id = response["UploadId"]
            logger.debug("Started multipart upload %s for %s", self.upload_id, self.key)
        return self.upload_id

    def write(self, data: bytes) -> int:
        """Buffer ``data``, uploading full parts as they accumulate.

        Returns:
            Number of bytes accepted.

        Raises:
            ValueError: If the writer was already closed or aborted.
        """
        self._check_open()
        self._buffer.extend(data)
        while len(self._buffer) >= self.part_size:
            chunk = bytes(self._buffer[:self.part_size])
            del self._buffer[:self.part_size]
            self._upload_part(chunk)
        return len(data)

    def close(self) -> dict:
        """Upload the remaining buffer and complete the upload.

        Returns:
            The API response containing the final ETag.
        """
        self._check_open()
        try:
            if self._buffer or not self.uploaded_parts:
                self._upload_part(bytes(self._buffer))
                self._buffer.clear()
            response = self.s3_client.complete_multipart_upload(
                Bucket=self.bucket,
                Key=self.key,
                UploadId=self.initiate(),
                MultipartUpload={"Parts": self.uploaded_parts},
            )
        except Exception:
            self.abort()
            raise
        self._finished = True
        logger.info(
            "Completed multipart upload of %s (%d parts)",
            self.key, len(self.uploaded_parts),
        )
        return response

    def abort(self) -> None:
        """Cancel the upload and discard uploaded parts."""
        if self._finished:
            return
        self._finished = True
        self._buffer.clear()
        if self.upload_id is None:
            return

        self.s3_client.abort_multipart_upload(
            Bucket=self.bucket,
            Key=self.key,
            UploadId=self.upload_id,
        )
        logger.info("Aborted multipart upload of %s", self.key)

    def get_uploaded_parts(self) -> list[dict]:
        """Get a copy of the uploaded parts list."""
        return list(self.uploaded_parts)

    def _upload_part(self, chunk: bytes) -> None:
        part_number = len(self.uploaded_parts) + 1
        response = self.s3_client.upload_part(
            Bucket=self.bucket,
            Key=self.key,
            UploadId=self.initiate(),
            PartNumber=part_number,
            Body=chunk,
        )
        self.uploaded_parts.append({
            "PartNumber": part_number,
            "ETag": response["ETag"],
        })

    def _check_open(self) -> None:
        if self._finished:
            raise ValueError("I/O operation on closed writer")

    def __enter__(self) -> "MultipartWriter":
        """Enter context manager - initiates upload."""
        self.initiate()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        """Exit context manager - aborts on exception, completes otherwise."""
        if exc_type is not None:
            self.abort()
        elif not self._finished:
            self.close()
        return False  # Don't suppress exceptions
