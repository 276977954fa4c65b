import logging
import subprocess
from dataclasses import dataclass
from typing import Iterable, Optional, Protocol

from .exceptions import DependencyError, Ec2HopError, NothingSelected

logger = logging.getLogger(__name__)

# fzf: 1 = no match, 130 = interrupted with Ctrl-C / Esc
FZF_NOTHING_SELECTED = (1, 130)


@dataclass
class SelectorOptions:
    prompt: str = "> "
    with_nth: Optional[str] = None
    sort: bool = True
    header: Optional[str] = None
    multi: bool = False


class Selector(Protocol):
    def select(
        self, lines: Iterable[str], options: SelectorOptions
    ) -> Optional[str]: ...


class FzfSelector:
    """Fuzzy-selection menu backed by the fzf terminal program."""

    def __init__(self, binary="fzf"):
        self.binary = binary

    def build_command(self, options):
        cmd = [self.binary, "--delimiter=\t", f"--prompt={options.prompt}"]
        if options.with_nth:
            cmd.append(f"--with-nth={options.with_nth}")
        if not options.sort:
            cmd.append("--no-sort")
        if options.header:
            cmd.append(f"--header={options.header}")
        cmd.append("--multi" if options.multi else "--no-multi")
        return cmd

    def select(self, lines, options):
        lines = [line for line in lines if line]
        if not lines:
            logger.debug("Selector '%s' got no input", options.prompt)
            return None

        cmd = self.build_command(options)
        logger.debug("Running %s", cmd)
        try:
            # stderr is left on the terminal, fzf draws its UI there.
            proc = subprocess.run(
                cmd,
                input="\n".join(lines) + "\n",
                stdout=subprocess.PIPE,
                text=True,
            )
        except FileNotFoundError:
            raise DependencyError(f"The fuzzy finder '{self.binary}' is required.")

        if proc.returncode in FZF_NOTHING_SELECTED:
            return None
        if proc.returncode != 0:
            raise Ec2HopError(f"{self.binary} exited with status {proc.returncode}")
        choice = proc.stdout.rstrip("\n")
        return choice or None


def require(value, stage):
    if not value:
        raise NothingSelected(stage)
    return value
