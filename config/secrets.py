"""
AWS Secrets Manager lookup for API keys and credentials

Secrets are only fetched when the service runs inside AWS (Lambda, ECS);
local runs read the same values from environment variables or .env.
"""

import os
import logging
from typing import Optional
from functools import lru_cache

import boto3
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)


@lru_cache(maxsize=32)
def get_secret(secret_name: str, region_name: str = "us-east-1") -> Optional[str]:
    """
    Retrieve a secret string from AWS Secrets Manager (cached per process)

    Args:
        secret_name: Name of the secret in Secrets Manager
        region_name: AWS region

    Returns:
        Secret value, or None if it could not be read
    """
    try:
        client = boto3.client('secretsmanager', region_name=region_name)
        response = client.get_secret_value(SecretId=secret_name)
        secret_value: Optional[str] = response.get('SecretString')

        logger.info(f"✅ Retrieved secret: {secret_name}")
        return secret_value

    except ClientError as e:
        error_code = e.response['Error']['Code']

        if error_code == 'ResourceNotFoundException':
            logger.warning(f"⚠️ Secret not found: {secret_name}")
        elif error_code == 'AccessDeniedException':
            logger.error(f"❌ Access denied to secret: {secret_name}")
        else:
            logger.error(f"❌ Error retrieving secret {secret_name}: {e}")

        return None

    except BotoCoreError as e:
        logger.error(f"❌ AWS client error retrieving secret {secret_name}: {str(e)}")
        return None


def is_aws_environment() -> bool:
    """Check if running in a managed AWS runtime (Lambda or ECS)"""
    if os.getenv('AWS_EXECUTION_ENV') or os.getenv('AWS_LAMBDA_FUNCTION_NAME'):
        return True

    if os.getenv('ECS_CONTAINER_METADATA_URI'):
        return True

    return False


def get_secret_or_env(
    secret_name: str,
    env_var_name: str,
    region_name: str = "us-east-1",
    required: bool = True
) -> Optional[str]:
    """
    Get value from Secrets Manager if in AWS, otherwise from environment variable

    Args:
        secret_name: Name of the secret in Secrets Manager
        env_var_name: Name of the environment variable
        region_name: AWS region
        required: Raise if the value is found nowhere

    Returns:
        Secret value or None

    Raises:
        ValueError: If required=True and value not found

    Example:
        >>> fal_key = get_secret_or_env('glammefy-fal-key', 'FAL_KEY')
    """
    if is_aws_environment():
        secret_value = get_secret(secret_name, region_name)
        if secret_value:
            return secret_value
        logger.warning(f"⚠️ Failed to retrieve secret {secret_name}, falling back to env var")

    env_value = os.getenv(env_var_name)
    if env_value:
        return env_value

    if required:
        error_msg = (
            f"Required secret not found: {secret_name} (Secrets Manager) "
            f"or {env_var_name} (environment variable)"
        )
        logger.error(f"❌ {error_msg}")
        raise ValueError(error_msg)

    logger.warning(f"⚠️ Optional secret not found: {secret_name}/{env_var_name}")
    return None
