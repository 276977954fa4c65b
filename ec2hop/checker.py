import shutil

from .exceptions import DependencyError

REMEDIATION = {
    "fzf": "Install fzf: https://github.com/junegunn/fzf#installation",
    "ssh": "Install an OpenSSH client (e.g. 'apt install openssh-client').",
    "mssh": "Install EC2 Instance Connect CLI: 'pip install ec2instanceconnectcli'.",
}


class SystemProbe:
    """Looks up programs on the host. Swap it out in tests."""

    def which(self, name):
        return shutil.which(name)

    def has(self, name):
        return self.which(name) is not None


class ConfigChecker:
    KNOWN_PROGRAMS = ("fzf", "ssh", "mssh")

    def __init__(self, probe=None):
        self.probe = probe or SystemProbe()

    def check_dependencies(self, required=(), any_of=()):
        """Raise DependencyError for the first missing program.

        Every name in ``required`` must be present; at least one name in
        ``any_of`` must be present when it is given.
        """
        for name in required:
            if not self.probe.has(name):
                raise DependencyError(
                    f"'{name}' is required but was not found on PATH. "
                    f"{REMEDIATION.get(name, '')}".strip()
                )
        if any_of and not any(self.probe.has(name) for name in any_of):
            hints = " ".join(REMEDIATION.get(name, "") for name in any_of).strip()
            raise DependencyError(
                f"One of {', '.join(any_of)} is required but none was found on PATH. "
                f"{hints}".strip()
            )

    def validate_all(self):
        """Report which of the programs the tools can use are installed."""
        return {name: self.probe.has(name) for name in self.KNOWN_PROGRAMS}
