import os
from typing import NamedTuple


class Config(NamedTuple):
    bucket_name: str = "arve.experimental.berlin"
    storage_prefix: str = "images/events"
    max_image_size_mb: float = 3.0
    http_timeout: float = 30.0
    storage_timeout: float = 30.0
    jpeg_quality: int = 100
    cache_control: str = "public, max-age=86400"
    object_acl: str = "public-read"

    @classmethod
    def from_env(cls, environ=None):
        """
        Build the configuration from environment variables, falling back to the defaults above

        Args:
            environ (dict): mapping to read from, os.environ when omitted
        """
        if environ is None:
            environ = os.environ
        defaults = cls()
        return cls(
            bucket_name=environ.get("BUCKET_NAME", defaults.bucket_name),
            storage_prefix=environ.get("STORAGE_PREFIX", defaults.storage_prefix).strip("/"),
            max_image_size_mb=float(environ.get("MAX_IMAGE_SIZE_MB", defaults.max_image_size_mb)),
            http_timeout=float(environ.get("HTTP_TIMEOUT", defaults.http_timeout)),
            storage_timeout=float(environ.get("STORAGE_TIMEOUT", defaults.storage_timeout)),
            jpeg_quality=int(environ.get("JPEG_QUALITY", defaults.jpeg_quality)),
            cache_control=environ.get("CACHE_CONTROL", defaults.cache_control),
            object_acl=environ.get("OBJECT_ACL", defaults.object_acl),
        )
