import base64
import json
from unittest import mock

import boto3
import cv2
import numpy as np
from botocore.stub import ANY


def random_image(width, height, seed=0, channels=3):
    rng = np.random.default_rng(seed)
    return rng.integers(0, 256, size=(height, width, channels), dtype=np.uint8)


def png_bytes(width=30, height=20):
    img = random_image(width, height, seed=1)
    _, buffer = cv2.imencode(".png", img)
    return img, buffer.tobytes()


def make_response(status_code=200, content=b"", headers=None):
    response = mock.MagicMock()
    response.status_code = status_code
    response.headers = headers if headers is not None else {"Content-Length": str(len(content))}
    response.content = content
    return response


def make_envelope(payload):
    if not isinstance(payload, bytes):
        payload = json.dumps(payload).encode("utf-8")
    return {"data": base64.b64encode(payload).decode("utf-8")}


def make_s3_client():
    return boto3.client(
        "s3",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )


def expected_put(config, key):
    return {
        "Bucket": config.bucket_name,
        "Key": key,
        "Body": ANY,
        "ContentType": "image/jpeg",
        "CacheControl": "public, max-age=86400",
        "ACL": "public-read",
    }
