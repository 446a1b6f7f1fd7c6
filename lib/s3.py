import logging
from typing import BinaryIO, Optional

import aioboto3

from core.config import settings

logger = logging.getLogger(__name__)


def _get_credentials() -> dict:
    """Lazily load AWS credentials to avoid import-time failures."""
    assert settings.aws_access_key_id, "AWS_ACCESS_KEY_ID not set in environment"
    assert settings.aws_secret_access_key, "AWS_SECRET_ACCESS_KEY not set in environment"
    assert settings.aws_region, "AWS_REGION not set in environment"

    return {
        "aws_access_key_id": settings.aws_access_key_id,
        "aws_secret_access_key": settings.aws_secret_access_key,
        "region_name": settings.aws_region,
    }


def _client_options() -> dict:
    if settings.aws_s3_endpoint_url:
        return {"endpoint_url": settings.aws_s3_endpoint_url}
    return {}


def base_url() -> str:
    if settings.aws_s3_endpoint_url:
        return settings.aws_s3_endpoint_url.rstrip("/")
    return f"https://s3.{settings.aws_region}.amazonaws.com"


def resume_key(job_requisition_id: str, first_name: str, last_name: str, file_extension: str) -> str:
    return f"job-applications/{job_requisition_id}/{first_name}_{last_name}_resume{file_extension}"


async def upload_resume(
    file: BinaryIO,
    job_requisition_id: str,
    first_name: str,
    last_name: str,
    file_extension: str,
    bucket_name: Optional[str] = None,
) -> str:
    """
    Upload an applicant's résumé and return its URL.

    Args:
        file: readable binary stream
        job_requisition_id: requisition the applicant applied to
        first_name / last_name: applicant's names, used in the object key
        file_extension: ``.pdf`` or ``.docx``
        bucket_name: defaults to ``AWS_S3_BUCKET``
    """
    bucket_name = bucket_name or settings.aws_s3_bucket
    assert bucket_name, "Bucket name must be provided"

    key = resume_key(job_requisition_id, first_name, last_name, file_extension)
    session = aioboto3.Session(**_get_credentials())
    async with session.client("s3", **_client_options()) as client:
        await client.put_object(Bucket=bucket_name, Key=key, Body=file.read())

    url = f"{base_url()}/{bucket_name}/{key}"
    logger.info("Resume uploaded", extra={"resume_url": url})
    return url


async def delete_file_from_s3(bucket_name: str, key: str) -> None:
    """
    Delete file from S3.

    Args:
        bucket_name (str): Name of the S3 bucket
        key (str): Key of the file in the S3 bucket
    """
    assert bucket_name, "Bucket name must be provided"
    assert key, "Key must be provided"

    session = aioboto3.Session(**_get_credentials())
    async with session.client("s3", **_client_options()) as client:
        await client.delete_object(Bucket=bucket_name, Key=key)
