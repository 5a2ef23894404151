import logging
import mimetypes

import cv2
from botocore.exceptions import BotoCoreError, ClientError

from lambda_image_processing.errors import EncodeError, WriteError
from lambda_image_processing.thumbnail import flatten_alpha

logger = logging.getLogger(__name__)


def object_key(config, destination_id, name):
    return f"{config.storage_prefix}/{destination_id}/{name}.jpg"


def encode_jpeg(img, quality):
    try:
        ok, buffer = cv2.imencode(".jpg", flatten_alpha(img), [int(cv2.IMWRITE_JPEG_QUALITY), quality])
    except cv2.error as e:
        raise EncodeError(f"Failed to encode image as JPEG: {e}") from e
    if not ok:
        raise EncodeError("Failed to encode image as JPEG")
    return buffer.tobytes()


def publish_images(destination_id, images, config, s3_client):
    """
    Encode each named image as JPEG and upload it under the destination id.
    Stops at the first failure, objects already written are left in place.

    Returns:
        list of the uploaded object keys, in upload order
    """
    uploaded = []
    for name, img in images.items():
        key = object_key(config, destination_id, name)
        body = encode_jpeg(img, config.jpeg_quality)
        content_type, _ = mimetypes.guess_type(key)

        logger.info("Uploading s3://%s/%s", config.bucket_name, key)
        try:
            s3_client.put_object(
                Bucket=config.bucket_name,
                Key=key,
                Body=body,
                ContentType=content_type or "image/jpeg",
                CacheControl=config.cache_control,
                ACL=config.object_acl,
            )
        except (ClientError, BotoCoreError) as e:
            raise WriteError(f"Failed to upload s3://{config.bucket_name}/{key}: {e}") from e
        uploaded.append(key)

    return uploaded
