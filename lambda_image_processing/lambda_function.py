import json
import logging

import boto3
from botocore.config import Config as BotoConfig

from lambda_image_processing.config import Config
from lambda_image_processing.fetcher import fetch_image
from lambda_image_processing.publisher import publish_images
from lambda_image_processing.request import decode_request, envelopes_from_event
from lambda_image_processing.thumbnail import transform

logger = logging.getLogger()
logger.setLevel(logging.INFO)

UNKNOWN_EVENT_ID = "unknown"


def storage_client(config, region_name=None):
    """S3 client whose connect and read timeouts come from the configuration."""
    boto_config = BotoConfig(connect_timeout=config.storage_timeout, read_timeout=config.storage_timeout)
    return boto3.client("s3", region_name=region_name, config=boto_config)


def process_request(request, config, s3_client, session=None):
    """Download the requested image, build its thumbnail and upload both."""
    logger.info("Received request to download %s", request.url)
    img = fetch_image(request.url, config, session=session)
    thumb = transform(img)

    destination_id = request.event_id or UNKNOWN_EVENT_ID
    keys = publish_images(destination_id, {"main": img, "thumb": thumb}, config, s3_client)
    return {"url": request.url, "event_id": destination_id, "keys": keys}


def lambda_handler(event, context, config=None, s3_client=None, session=None):
    """
    event like
    {
        "data": "<base64 of {\"Url\": \"https://example.com/image.jpg\", \"EventID\": \"42\"}>"
    }
    or an SQS/SNS batch whose records carry such envelopes.
    Errors are raised so the platform redelivers the message.
    """
    config = config or Config.from_env()
    s3_client = s3_client or storage_client(config)

    results = []
    for envelope in envelopes_from_event(event):
        request = decode_request(envelope)
        results.append(process_request(request, config, s3_client, session=session))

    return {
        "statusCode": 200,
        "body": json.dumps({
            "message": "Images processed successfully",
            "results": results
        })
    }
