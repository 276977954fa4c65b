import logging
from dataclasses import dataclass

from .selector import SelectorOptions, require

logger = logging.getLogger(__name__)

RUNNING_FILTER = {"Name": "instance-state-name", "Values": ["running"]}


@dataclass
class InstanceRow:
    name: str
    address: str

    @classmethod
    def parse(cls, line):
        name, _, address = line.rpartition("\t")
        return cls(name=name, address=address.strip())


def tag_filter(key, value):
    return {"Name": f"tag:{key}", "Values": [value]}


def iter_instances(ec2_client, filters):
    paginator = ec2_client.get_paginator("describe_instances")
    for page in paginator.paginate(Filters=filters):
        for reservation in page.get("Reservations", []):
            yield from reservation.get("Instances", [])


def list_roles(ctx):
    """Distinct role tag values of running instances in ``ctx.env``."""
    settings = ctx.settings
    logger.debug("Looking up roles for environment '%s'", ctx.env)
    filters = [tag_filter(settings.env_tag, ctx.env), RUNNING_FILTER]
    roles = set()
    for instance in iter_instances(ctx.client("ec2"), filters):
        for tag in instance.get("Tags", []):
            if tag.get("Key") == settings.role_tag and tag.get("Value"):
                roles.add(tag["Value"])
    return sorted(roles)


def choose_role(ctx, cache):
    roles = cache.get_or_create(ctx.env, lambda: list_roles(ctx))
    choice = ctx.selector.select(roles, SelectorOptions(prompt="Role> "))
    return require(choice, "role")


def list_instance_rows(ctx, role):
    """``name<TAB>private-ip`` for each running instance with env and role.

    Rows keep the provider's order; only the Name tag is projected.
    """
    settings = ctx.settings
    filters = [
        tag_filter(settings.env_tag, ctx.env),
        tag_filter(settings.role_tag, role),
        RUNNING_FILTER,
    ]
    rows = []
    for instance in iter_instances(ctx.client("ec2"), filters):
        address = instance.get("PrivateIpAddress")
        tags = [dict(tag, PrivateIpAddress=address) for tag in instance.get("Tags", [])]
        for tag in tags:
            if tag.get("Key") == settings.name_tag and tag["PrivateIpAddress"]:
                rows.append(f"{tag.get('Value', '')}\t{tag['PrivateIpAddress']}")
    logger.info("Found %d instances for %s/%s", len(rows), ctx.env, role)
    return rows


def choose_instance(ctx, role):
    rows = list_instance_rows(ctx, role)
    choice = ctx.selector.select(rows, SelectorOptions(prompt="Instance> "))
    return InstanceRow.parse(require(choice, "instance"))
