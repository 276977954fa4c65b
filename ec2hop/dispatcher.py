import enum
import logging
import subprocess
from dataclasses import dataclass

from .exceptions import DependencyError

logger = logging.getLogger(__name__)


class ClientKind(enum.Enum):
    STANDARD = "ssh"
    ENHANCED = "mssh"

    @property
    def binary(self):
        return self.value


@dataclass
class Target:
    address: str
    user: str | None = None
    instance_id: str | None = None


def choose_client(override=None, preference=None, probe=None):
    """Pick the remote-login client.

    Order: the per-invocation flag, then the configured preference
    (``EC2_SSH_BINARY``), then mssh when it is installed, then plain ssh.
    """
    if override is not None:
        return override
    if preference:
        return ClientKind(preference)
    if probe is not None and probe.has(ClientKind.ENHANCED.binary):
        return ClientKind.ENHANCED
    return ClientKind.STANDARD


def build_command(kind, target, profile=None, region=None):
    host = target.address
    cmd = [kind.binary]
    if kind is ClientKind.ENHANCED:
        # mssh looks the instance up itself, in the same account and region.
        if target.instance_id:
            host = target.instance_id
        if profile:
            cmd.extend(["-u", profile])
        if region:
            cmd.extend(["-z", region])
    cmd.append(f"{target.user}" if target.user else host)
    return cmd


class Dispatcher:
    def __init__(self, out=None, profile=None, region=None):
        self.out = out
        self.profile = profile
        self.region = region

    def _print(self, message):
        print(message, file=self.out)

    def describe(self, target):
        self._print(f"Host: {target.address}")
        if target.user:
            self._print(f"User: {target.user}")
        if target.instance_id:
            self._print(f"Instance: {target.instance_id}")

    def dispatch(self, target, kind, show=False):
        """Print the endpoint, then run the client unless ``show`` is set."""
        self.describe(target)
        if show:
            return 0

        cmd = build_command(kind, target, self.profile, self.region)
        logger.info("Running %s", " ".join(cmd))
        try:
            # Inherit the terminal; the client owns host keys and credentials.
            return subprocess.call(cmd)
        except FileNotFoundError:
            raise DependencyError(
                f"The remote-login client '{kind.binary}' is required."
            )
