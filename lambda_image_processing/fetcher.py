import logging
import os
from enum import Enum
from urllib.parse import urlparse

import cv2
import numpy as np
import requests

from lambda_image_processing.errors import (
    BadStatusError,
    FetchError,
    TooLargeError,
    UnknownLengthError,
    UnsupportedImageError,
)

logger = logging.getLogger(__name__)


class ImageFormat(Enum):
    JPEG = b"\xff\xd8\xff"
    PNG = b"\x89PNG\r\n\x1a\n"

    @classmethod
    def sniff(cls, data):
        """Return the format whose signature starts data, None when nothing matches."""
        for image_format in cls:
            if data.startswith(image_format.value):
                return image_format
        return None


def image_extension(url):
    """
    Extension of the URL path without the dot
    http://example.com/image.jpg -> "jpg"
    """
    return os.path.splitext(urlparse(url).path)[1].lstrip(".").lower()


def validate_response(response, url, max_size_mb):
    if response.status_code < 200 or response.status_code >= 300:
        raise BadStatusError(f"Failed to download {url}: HTTP {response.status_code}")

    content_length = response.headers.get("Content-Length")
    if content_length is None:
        raise UnknownLengthError(f"Couldn't deduce content length from response: {url}")
    try:
        size_bytes = int(content_length)
    except ValueError as e:
        raise UnknownLengthError(f"Invalid content length {content_length!r}: {url}") from e
    if size_bytes < 0:
        raise UnknownLengthError(f"Couldn't deduce content length from response: {url}")

    size_mb = size_bytes / 1024 / 1024
    if size_mb > max_size_mb:
        raise TooLargeError(f"Image is greater than {max_size_mb} MB in size: {url}")


def decode_image(data):
    """
    Decode JPEG or PNG bytes into an 8-bit OpenCV image, sniffing the format from the content.
    Transparency is kept: images with an alpha channel come back as 4-channel BGRA.
    """
    image_format = ImageFormat.sniff(data)
    if image_format is None:
        raise UnsupportedImageError("Content is neither a JPEG nor a PNG image")

    nparr = np.frombuffer(data, np.uint8)
    try:
        img = cv2.imdecode(nparr, cv2.IMREAD_UNCHANGED)
    except cv2.error as e:
        raise UnsupportedImageError(f"Invalid {image_format.name} image data: {e}") from e
    if img is None:
        raise UnsupportedImageError(f"Invalid {image_format.name} image data")

    # 16-bit PNG
    if img.dtype == np.uint16:
        img = (img // 257).astype(np.uint8)
    if img.ndim == 2:
        img = cv2.cvtColor(img, cv2.COLOR_GRAY2BGR)
    return img


def fetch_image(url, config, session=None):
    """
    Download the image at url after a HEAD probe has validated its status and size

    Args:
        url (str): image location
        config (Config): supplies the size limit and the HTTP timeout
        session (requests.Session): optional session, the requests module is used when omitted

    Returns:
        numpy.ndarray: the decoded image
    """
    http = session or requests
    logger.info("Downloading %s (type: %s)", url, image_extension(url) or "unknown")

    try:
        probe = http.head(url, timeout=config.http_timeout, allow_redirects=True)
        validate_response(probe, url, config.max_image_size_mb)

        response = http.get(url, timeout=config.http_timeout, stream=True)
        try:
            validate_response(response, url, config.max_image_size_mb)
            data = response.content
        finally:
            response.close()
    except requests.RequestException as e:
        raise FetchError(f"Failed to download {url}: {e}") from e

    return decode_image(data)
