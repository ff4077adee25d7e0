"""
Provider and deployment configuration.

Values cascade: command-line options override serverless.yml, which
overrides environment variables, which override the defaults below.
"""

import os

from pydantic import BaseModel, Field

DEFAULT_STAGE = "dev"
DEFAULT_REGION = "cn-shanghai"
DEFAULT_RUNTIME = "nodejs6"


class ProviderConfig(BaseModel):
    """
    Aliyun provider configuration.

    Example:
        config = ProviderConfig(
            region="cn-hangzhou",
            stage="prod",
            account_id="1234567890123456",
        )
    """

    region: str = Field(default=DEFAULT_REGION, description="Aliyun region")
    stage: str = Field(default=DEFAULT_STAGE, description="Deployment stage")
    account_id: str | None = Field(default=None, description="Aliyun account ID")
    runtime: str = Field(default=DEFAULT_RUNTIME, description="Default function runtime")
    credentials: str | None = Field(
        default=None, description="Path to the credentials file"
    )

    class Config:
        frozen = True

    @classmethod
    def from_env(cls, **overrides) -> "ProviderConfig":
        """
        Build a config from environment variables.

        Reads ALIYUN_REGION, ALIYUN_ACCOUNT_ID, ALIYUN_CREDENTIALS and
        FCDEPLOY_STAGE. Keyword arguments that are not None win.
        """
        values = {
            "region": os.environ.get("ALIYUN_REGION"),
            "account_id": os.environ.get("ALIYUN_ACCOUNT_ID"),
            "credentials": os.environ.get("ALIYUN_CREDENTIALS"),
            "stage": os.environ.get("FCDEPLOY_STAGE"),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**{k: v for k, v in values.items() if v is not None})


class DeployOptions(BaseModel):
    """Options for one reconciliation run."""

    upload_concurrency: int = Field(
        default=4, ge=1, description="Maximum concurrent artifact uploads"
    )

    class Config:
        frozen = True
