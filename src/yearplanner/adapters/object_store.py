"""S3-compatible object storage adapter."""

import json
import logging

from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)

MISSING_KEY_CODES = {"NoSuchKey", "404", "NotFound"}


class ObjectStore:
    """
    Object storage backed by any S3-compatible service.

    Implements ItemStore protocol. Objects live at
    `users/<user>/<type>.json`. The boto3 client is injected so the
    endpoint (AWS, Scaleway, MinIO) is decided by the caller.
    """

    def __init__(self, client, bucket_name: str):
        self.client = client
        self.bucket_name = bucket_name

    @staticmethod
    def _prefix(user_id: str) -> str:
        return f"users/{user_id}/"

    def _key(self, user_id: str, data_type: str) -> str:
        return f"{self._prefix(user_id)}{data_type}.json"

    def load(self, user_id: str, data_type: str) -> list:
        """Load items. Missing objects and backend errors read as []."""
        key = self._key(user_id, data_type)
        try:
            result = self.client.get_object(Bucket=self.bucket_name, Key=key)
            items = json.loads(result["Body"].read().decode("utf-8"))
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "")
            if code not in MISSING_KEY_CODES:
                logger.warning(f"Object storage load error for {key}: {e}")
            return []
        except (BotoCoreError, json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning(f"Object storage load error for {key}: {e}")
            return []
        if not isinstance(items, list):
            logger.warning(f"Ignoring {key}: expected a JSON array")
            return []
        return items

    def save(self, user_id: str, data_type: str, items: list) -> bool:
        key = self._key(user_id, data_type)
        try:
            self.client.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=json.dumps(items).encode("utf-8"),
                ContentType="application/json",
            )
        except (ClientError, BotoCoreError) as e:
            logger.warning(f"Object storage save error for {key}: {e}")
            return False
        return True

    def _keys(self, prefix: str) -> list[str]:
        paginator = self.client.get_paginator("list_objects_v2")
        keys = []
        for page in paginator.paginate(Bucket=self.bucket_name, Prefix=prefix):
            keys.extend(obj["Key"] for obj in page.get("Contents", []))
        return keys

    def list(self, user_id: str) -> set[str]:
        prefix = self._prefix(user_id)
        try:
            keys = self._keys(prefix)
        except (ClientError, BotoCoreError) as e:
            logger.warning(f"Object storage list error for {prefix}: {e}")
            return set()
        return {
            key[len(prefix):].removesuffix(".json")
            for key in keys
            if key.endswith(".json") and "/" not in key[len(prefix):]
        }

    def clear(self) -> None:
        for key in self._keys("users/"):
            self.client.delete_object(Bucket=self.bucket_name, Key=key)
