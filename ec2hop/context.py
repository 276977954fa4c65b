from dataclasses import dataclass, field
from typing import Any, Optional

from .checker import SystemProbe
from .config_loader import Settings
from .dispatcher import ClientKind
from .selector import FzfSelector, Selector


@dataclass
class ResolveContext:
    """Everything one resolution run needs, passed explicitly to each stage."""

    settings: Settings
    session: Any
    selector: Selector = field(default_factory=FzfSelector)
    probe: SystemProbe = field(default_factory=SystemProbe)
    env: Optional[str] = None
    show: bool = False
    client_override: Optional[ClientKind] = None
    _clients: dict = field(default_factory=dict, repr=False)

    def __post_init__(self):
        if self.env is None:
            self.env = self.settings.default_env

    def client(self, service_name):
        if service_name not in self._clients:
            self._clients[service_name] = self.session.client(service_name)
        return self._clients[service_name]
