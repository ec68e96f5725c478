import boto3

from botocore.config import Config

from chalicelib.utils import config

aws_config_ddb = Config(retries={'max_attempts': 30}, region_name=config.aws_region())

# single attempt with short timeouts, notifications are best-effort
aws_config_ses = Config(
    retries={'max_attempts': 1},
    connect_timeout=2,
    read_timeout=3,
    region_name=config.aws_region()
)


def get_dynamodb_table(table_name: str):
    """
    DynamoDB Table resource, pointed at DynamoDB Local when ENDPOINT_URL is set
    """
    endpoint_url = config.dynamodb_endpoint_url()
    if endpoint_url:
        return boto3.resource('dynamodb', endpoint_url=endpoint_url, config=aws_config_ddb).Table(table_name)
    return boto3.resource('dynamodb', config=aws_config_ddb).Table(table_name)


def get_ses_client():
    # Simple Email Service Client.
    return boto3.client('ses', config=aws_config_ses)
