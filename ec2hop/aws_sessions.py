import logging

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .exceptions import Ec2HopError

logger = logging.getLogger(__name__)


class AWSSessions:
    def __init__(self):
        # Keep "Found credentials in ..." notices off the terminal while menus are up.
        boto3.set_stream_logger(name="botocore.credentials", level=logging.ERROR)

        self.sessions = {}
        self.default_session = None

    def get_session(self, profile_name=None, region_name=None):
        if profile_name is None:
            if not self.default_session:
                self.default_session = self.create_session(region_name=region_name)
            return self.default_session
        if profile_name not in self.sessions:
            self.sessions[profile_name] = self.create_session(
                profile_name=profile_name, region_name=region_name
            )
        return self.sessions[profile_name]

    def create_session(self, profile_name=None, region_name=None):
        kwargs = {}
        if profile_name is not None:
            kwargs["profile_name"] = profile_name
        if region_name is not None:
            kwargs["region_name"] = region_name
        try:
            session = boto3.Session(**kwargs)
            identity = session.client("sts").get_caller_identity()
        except (BotoCoreError, ClientError) as e:
            label = profile_name or "default"
            raise Ec2HopError(
                f"Failed to create AWS session with profile '{label}': {e}"
            )
        logger.debug(
            "Authenticated as %s in account %s",
            identity.get("Arn"),
            identity.get("Account"),
        )
        return session
