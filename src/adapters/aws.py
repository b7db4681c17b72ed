from __future__ import annotations

import os
from dataclasses import dataclass
from typing import TYPE_CHECKING

import boto3
from botocore.client import BaseClient
from botocore.config import Config

from src.app.config import env_bool

if TYPE_CHECKING:
    from mypy_boto3_dynamodb import DynamoDBClient
else:
    DynamoDBClient = BaseClient  # type: ignore[misc,assignment]


@dataclass(frozen=True, slots=True)
class AwsRuntimeConfig:
    """AWS connection settings.

    Env vars:
      - AWS_REGION (default eu-west-1)
      - ENDPOINT_URL (preferred for LocalStack)
      - USE_LOCALSTACK, LOCALSTACK_ENDPOINT_URL (legacy)
      - DDB_TIMEOUT_S: connect/read timeout per call (default 5)
      - DDB_MAX_ATTEMPTS: botocore retry attempts (default 3)
    """

    use_localstack: bool
    region: str
    endpoint_url: str | None
    timeout_s: float = 5.0
    max_attempts: int = 3

    @staticmethod
    def from_env() -> "AwsRuntimeConfig":
        endpoint_url = os.getenv("ENDPOINT_URL")
        if endpoint_url is not None:
            endpoint_url = endpoint_url.strip() or None

        return AwsRuntimeConfig(
            use_localstack=env_bool("USE_LOCALSTACK", False),
            region=os.getenv("AWS_REGION", "eu-west-1"),
            endpoint_url=endpoint_url,
            timeout_s=float(os.getenv("DDB_TIMEOUT_S", "5")),
            max_attempts=int(os.getenv("DDB_MAX_ATTEMPTS", "3")),
        )

    def resolved_endpoint_url(self) -> str | None:
        if self.endpoint_url:
            return self.endpoint_url
        if self.use_localstack:
            return os.getenv("LOCALSTACK_ENDPOINT_URL", "http://localhost:4566")
        return None

    def client_config(self) -> Config:
        return Config(
            connect_timeout=self.timeout_s,
            read_timeout=self.timeout_s,
            retries={"max_attempts": self.max_attempts, "mode": "standard"},
        )


def dynamodb_client() -> DynamoDBClient:
    cfg = AwsRuntimeConfig.from_env()
    session = boto3.session.Session(region_name=cfg.region)
    return session.client(
        "dynamodb",
        endpoint_url=cfg.resolved_endpoint_url(),
        config=cfg.client_config(),
    )
