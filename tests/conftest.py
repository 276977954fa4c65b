from unittest.mock import MagicMock

import pytest

from ec2hop.config_loader import Settings
from ec2hop.context import ResolveContext


class StubSelector:
    """Answers each menu with a scripted pick and records what it was shown."""

    def __init__(self, *picks):
        self.picks = list(picks)
        self.calls = []

    def select(self, lines, options):
        lines = list(lines)
        self.calls.append((lines, options))
        if not self.picks:
            return None
        pick = self.picks.pop(0)
        if callable(pick):
            return pick(lines)
        return pick


class StubProbe:
    def __init__(self, *installed):
        self.installed = set(installed)

    def which(self, name):
        return f"/usr/bin/{name}" if name in self.installed else None

    def has(self, name):
        return name in self.installed


def paginated(client, operation_pages):
    """Make ``client.get_paginator(op).paginate()`` yield the given pages."""

    def get_paginator(operation):
        paginator = MagicMock()
        pages = operation_pages.get(operation, [])
        if callable(pages):
            paginator.paginate.side_effect = pages
        else:
            paginator.paginate.return_value = pages
        return paginator

    client.get_paginator.side_effect = get_paginator
    return client


@pytest.fixture
def settings(tmp_path):
    return Settings(cache_dir=str(tmp_path / "cache"))


@pytest.fixture
def make_ctx(settings):
    def factory(selector=None, clients=None, **kwargs):
        clients = clients or {}
        session = MagicMock()
        session.client.side_effect = lambda name: clients.setdefault(name, MagicMock())
        return ResolveContext(
            settings=settings,
            session=session,
            selector=selector or StubSelector(),
            probe=StubProbe(),
            **kwargs,
        )

    return factory
