#!/usr/bin/env python3
"""
Verify the object storage configuration.
Checks that the bucket is reachable, writes a probe object, prints its public
URL and removes it again.

Run with: python scripts/verify_storage.py
"""
import logging
import sys
from datetime import datetime
from pathlib import Path

import boto3
from botocore.exceptions import BotoCoreError, ClientError

sys.path.append(str(Path(__file__).resolve().parents[1]))

from app.core.config import settings

# Setup logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

REQUIRED_SETTINGS = ("STORAGE_ENDPOINT", "STORAGE_ACCESS_KEY_ID", "STORAGE_SECRET_ACCESS_KEY", "STORAGE_BUCKET_NAME")

def verify_storage() -> bool:
    """Test connection to the bucket and a put/delete round trip"""
    missing = [name for name in REQUIRED_SETTINGS if not getattr(settings, name)]
    if missing:
        logger.error(f"Missing required settings: {', '.join(missing)}")
        logger.error("Please set these variables in your .env file or environment")
        return False

    bucket = settings.STORAGE_BUCKET_NAME
    logger.info(f"Connecting to object storage at {settings.STORAGE_ENDPOINT}")
    s3 = boto3.client(
        "s3",
        endpoint_url=settings.STORAGE_ENDPOINT,
        aws_access_key_id=settings.STORAGE_ACCESS_KEY_ID,
        aws_secret_access_key=settings.STORAGE_SECRET_ACCESS_KEY,
    )

    try:
        s3.head_bucket(Bucket=bucket)
        logger.info(f"✅ Bucket '{bucket}' exists and is accessible")
    except ClientError as e:
        error_code = e.response.get("Error", {}).get("Code", "Unknown")
        if error_code == "404":
            logger.error(f"❌ Bucket '{bucket}' does not exist")
        elif error_code == "403":
            logger.error(f"❌ No permission to access bucket '{bucket}'")
        else:
            logger.error(f"❌ Error accessing bucket: {e}")
        return False
    except BotoCoreError as e:
        logger.error(f"❌ Failed to connect: {e}")
        return False

    probe_key = f"healthcheck/probe-{datetime.now().strftime('%Y%m%d%H%M%S')}.txt"
    try:
        s3.put_object(
            Bucket=bucket,
            Key=probe_key,
            Body=f"Probe written on {datetime.now().isoformat()}",
            ContentType="text/plain",
        )
        logger.info(f"✅ Wrote probe object {probe_key}")
        if settings.STORAGE_PUBLIC_URL:
            logger.info(f"Public URL should be: {settings.STORAGE_PUBLIC_URL.rstrip('/')}/{probe_key}")
        else:
            logger.warning("STORAGE_PUBLIC_URL not set; images will be served through the media proxy")
        s3.delete_object(Bucket=bucket, Key=probe_key)
        logger.info("✅ Deleted probe object")
    except (BotoCoreError, ClientError) as e:
        logger.error(f"❌ Probe round trip failed: {e}")
        return False

    logger.info("Object storage is properly configured.")
    return True

if __name__ == "__main__":
    sys.exit(0 if verify_storage() else 1)
