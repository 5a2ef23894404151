import argparse
import configparser
import os
import sys

import boto3
from botocore.exceptions import BotoCoreError, ClientError

TOPIC_NAME = "imageProcessingResponses"
DEFAULT_REGION = "us-east-1"


def session_from_credentials(credentials_file, region_name, profile="default"):
    """
    Build a boto3 session from one profile of an AWS shared credentials file

    Args:
        credentials_file (str): path to a file in the ~/.aws/credentials format
        region_name (str): region the clients of the session talk to
        profile (str): section of the file holding the keys
    """
    parser = configparser.ConfigParser()
    if not parser.read(credentials_file):
        raise FileNotFoundError(f"Credentials file not found: {credentials_file}")
    if not parser.has_section(profile):
        raise KeyError(f"Profile {profile!r} missing from {credentials_file}")

    section = parser[profile]
    return boto3.session.Session(
        aws_access_key_id=section.get("aws_access_key_id"),
        aws_secret_access_key=section.get("aws_secret_access_key"),
        aws_session_token=section.get("aws_session_token"),
        region_name=region_name,
    )


def create_topic(sns, name=TOPIC_NAME):
    """Create the topic, SNS returns the existing ARN when it is already there."""
    response = sns.create_topic(Name=name)
    return response["TopicArn"]


def main(argv=None, sns=None):
    parser = argparse.ArgumentParser(description="Create the image processing response topic")
    parser.add_argument("--credentials", default="credentials", help="path to the AWS shared credentials file")
    args = parser.parse_args(argv)
    region_name = os.environ.get("AWS_REGION", DEFAULT_REGION)

    try:
        if sns is None:
            sns = session_from_credentials(args.credentials, region_name).client("sns")
        topic_arn = create_topic(sns)
    except (OSError, KeyError, configparser.Error) as e:
        print(f"Failed to create sns client: {e}", file=sys.stderr)
        return 1
    except (ClientError, BotoCoreError) as e:
        print(f"Failed to create topic: {e}", file=sys.stderr)
        return 1

    print(f"Successfully created topic: {topic_arn}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
