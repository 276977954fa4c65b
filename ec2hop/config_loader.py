import json
import os
from dataclasses import dataclass, field

import jsonschema

from .exceptions import Ec2HopError

DEFAULT_CONFIG_PATH = os.path.join("~", ".config", "ec2hop", "config.json")
SSH_BINARIES = ("ssh", "mssh")


@dataclass
class Settings:
    profile: str | None = None
    region: str | None = None
    default_env: str = "prod"
    cache_dir: str = os.path.join("~", ".cache", "ec2hop")
    env_tag: str = "Environment"
    role_tag: str = "Role"
    name_tag: str = "Name"
    default_user: str = "ec2-user"
    os_users: dict[str, str] = field(default_factory=lambda: {"ubuntu": "ubuntu"})
    ssh_binary: str | None = None
    log_level: str = "WARNING"

    @property
    def cache_path(self):
        return os.path.expanduser(self.cache_dir)


class ConfigLoader:
    SCHEMA = {
        "type": "object",
        "properties": {
            "profile": {"type": "string"},
            "region": {"type": "string"},
            "default_env": {"type": "string", "minLength": 1},
            "cache_dir": {"type": "string", "minLength": 1},
            "env_tag": {"type": "string", "minLength": 1},
            "role_tag": {"type": "string", "minLength": 1},
            "name_tag": {"type": "string", "minLength": 1},
            "default_user": {"type": "string", "minLength": 1},
            "os_users": {
                "type": "object",
                "additionalProperties": {"type": "string", "minLength": 1},
            },
            "ssh_binary": {"enum": list(SSH_BINARIES)},
            "log_level": {
                "enum": ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
            },
        },
        "additionalProperties": False,
    }

    def __init__(self, config_path=None, environ=None):
        self.environ = os.environ if environ is None else environ
        self.config_path = os.path.expanduser(
            config_path or self.environ.get("EC2HOP_CONFIG") or DEFAULT_CONFIG_PATH
        )

    def validate_schema(self, config):
        try:
            jsonschema.validate(instance=config, schema=self.SCHEMA)
        except jsonschema.exceptions.ValidationError as e:
            raise Ec2HopError(f"Configuration validation failed: {e.message}")

    def read_file(self):
        if not os.path.exists(self.config_path):
            return {}
        with open(self.config_path, "r") as f:
            try:
                return json.load(f)
            except json.JSONDecodeError as e:
                raise Ec2HopError(f"Failed to parse JSON config: {e}")

    def apply_environment(self, config, use_ssh_binary=True):
        binary = self.environ.get("EC2_SSH_BINARY") if use_ssh_binary else None
        if binary:
            if binary not in SSH_BINARIES:
                raise Ec2HopError(
                    f"EC2_SSH_BINARY must be one of {', '.join(SSH_BINARIES)}, "
                    f"got '{binary}'"
                )
            config["ssh_binary"] = binary
        level = self.environ.get("EC2HOP_LOG_LEVEL")
        if level:
            config["log_level"] = level.upper()

    def load_config(self, use_ssh_binary=True):
        """Return Settings built from the config file, then the environment.

        ``use_ssh_binary=False`` ignores EC2_SSH_BINARY, for tools that have
        no client choice.
        """
        config = self.read_file()
        self.validate_schema(config)
        self.apply_environment(config, use_ssh_binary)
        self.validate_schema(config)
        return Settings(**config)
