"""Region-bound AWS clients for instance lookups.

This module builds the boto3 clients the resolver talks to. A region
client pairs an EC2 client and an IAM client created from one session
bound to a single region, and exposes the two read-only calls the
resolver needs.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Protocol, Sequence

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError

from ..config import ResolverConfig, Settings, get_settings
from ..constants import INSTANCE_STATE_FILTER, INSTANCE_STATES
from ..errors import ConfigError

logger = logging.getLogger(__name__)


class RegionClient(Protocol):
    """Read-only inventory calls against one region."""

    def describe_instances(
        self, instance_id: str, states: Sequence[str] = INSTANCE_STATES
    ) -> List[Dict[str, Any]]:
        ...

    def get_instance_profile(self, profile_arn: str) -> List[Dict[str, Any]]:
        ...


def create_session(config: ResolverConfig, region: str) -> boto3.Session:
    """Create a boto3 session from resolver credentials.

    Args:
        config: Resolver credentials
        region: Region the session is bound to

    Returns:
        Configured boto3 Session
    """
    session_kwargs = {"region_name": region}

    if config.access_key_id and config.secret_access_key:
        session_kwargs["aws_access_key_id"] = config.access_key_id
        session_kwargs["aws_secret_access_key"] = config.secret_access_key

    return boto3.Session(**session_kwargs)


def client_config(settings: Optional[Settings] = None) -> Config:
    """Build the botocore client config shared by EC2 and IAM clients.

    Retries are disabled; the caller owns retry policy.
    """
    settings = settings or get_settings()
    return Config(
        connect_timeout=settings.connect_timeout,
        read_timeout=settings.read_timeout,
        retries={"total_max_attempts": 1, "mode": "standard"},
    )


def instance_profile_name(profile_arn: str) -> str:
    """Extract the instance profile name from its ARN.

    Example:
        >>> instance_profile_name('arn:aws:iam::123456789012:instance-profile/app/web')
        'web'
    """
    resource = profile_arn.split(":", 5)[-1]
    return resource.rsplit("/", 1)[-1]


class AWSRegionClient:
    """EC2 and IAM clients sharing one region-bound session."""

    def __init__(self, session: boto3.Session, settings: Optional[Settings] = None):
        config = client_config(settings)
        self.region = session.region_name
        self.ec2 = session.client("ec2", config=config)
        self.iam = session.client("iam", config=config)

    def describe_instances(
        self, instance_id: str, states: Sequence[str] = INSTANCE_STATES
    ) -> List[Dict[str, Any]]:
        """Describe one instance, keeping only the given lifecycle states.

        Args:
            instance_id: EC2 instance ID
            states: Allowed instance-state-name values (filtered server-side)

        Returns:
            Instance records across all reservations and pages
        """
        paginator = self.ec2.get_paginator("describe_instances")
        instances: List[Dict[str, Any]] = []
        for page in paginator.paginate(
            InstanceIds=[instance_id],
            Filters=[{"Name": INSTANCE_STATE_FILTER, "Values": list(states)}],
        ):
            for reservation in page.get("Reservations", []):
                instances.extend(reservation.get("Instances", []))
        return instances

    def get_instance_profile(self, profile_arn: str) -> List[Dict[str, Any]]:
        """Fetch the roles attached to an instance profile.

        Args:
            profile_arn: Instance profile ARN as reported by EC2

        Returns:
            Role records of the instance profile
        """
        response = self.iam.get_instance_profile(
            InstanceProfileName=instance_profile_name(profile_arn)
        )
        return response.get("InstanceProfile", {}).get("Roles", [])

    def __repr__(self) -> str:
        return f"<AWSRegionClient region={self.region}>"


def new_aws_client(config: ResolverConfig, region: str) -> AWSRegionClient:
    """Default client factory used by the region client cache.

    Raises:
        ConfigError: If botocore cannot build the clients
    """
    try:
        client = AWSRegionClient(create_session(config, region))
    except BotoCoreError as e:
        raise ConfigError(f"unable to create AWS client for {region}: {e}") from e
    logger.debug(f"Created AWS clients for region {region}")
    return client
