import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from .dispatcher import Target
from .exceptions import NothingSelected
from .selector import SelectorOptions, require

logger = logging.getLogger(__name__)

TASK_STATUSES = ("RUNNING", "STOPPED")
DESCRIBE_TASKS_BATCH = 100
EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def short_name(arn):
    """Drop the ``arn:aws:ecs:...:kind/`` prefix from an ECS resource ARN."""
    return arn.split("/")[-1]


@dataclass
class TaskRow:
    arn: str
    status: str
    timestamp: datetime | None
    container_instance_arn: str | None = None

    @classmethod
    def from_description(cls, task, status=None):
        status = status or task.get("lastStatus") or task.get("desiredStatus", "")
        if status == "STOPPED":
            timestamp = task.get("stoppedAt") or task.get("startedAt")
        else:
            timestamp = task.get("startedAt")
        return cls(
            arn=task["taskArn"],
            status=status,
            timestamp=timestamp or task.get("createdAt"),
            container_instance_arn=task.get("containerInstanceArn"),
        )

    @property
    def sort_key(self):
        return self.timestamp or EPOCH

    def line(self):
        stamp = self.timestamp.isoformat(timespec="seconds") if self.timestamp else "-"
        return f"{self.arn}\t{self.status}\t{stamp}\t{short_name(self.arn)}"


def _paginate(client, operation, key, **kwargs):
    paginator = client.get_paginator(operation)
    items = []
    for page in paginator.paginate(**kwargs):
        items.extend(page.get(key, []))
    return items


def list_clusters(ctx):
    return _paginate(ctx.client("ecs"), "list_clusters", "clusterArns")


def list_services(ctx, cluster):
    return _paginate(
        ctx.client("ecs"), "list_services", "serviceArns", cluster=cluster
    )


def _choose_by_short_name(ctx, arns, prompt, stage):
    by_name = {short_name(arn): arn for arn in arns}
    choice = ctx.selector.select(sorted(by_name), SelectorOptions(prompt=prompt))
    return by_name[require(choice, stage)]


def choose_cluster(ctx):
    return _choose_by_short_name(ctx, list_clusters(ctx), "Cluster> ", "cluster")


def choose_service(ctx, cluster):
    return _choose_by_short_name(
        ctx, list_services(ctx, cluster), "Service> ", "service"
    )


def describe_tasks(ctx, cluster, task_arns):
    ecs = ctx.client("ecs")
    tasks = []
    for start in range(0, len(task_arns), DESCRIBE_TASKS_BATCH):
        batch = task_arns[start : start + DESCRIBE_TASKS_BATCH]
        tasks.extend(ecs.describe_tasks(cluster=cluster, tasks=batch)["tasks"])
    return tasks


def list_tasks(ctx, cluster, service):
    """RUNNING and STOPPED tasks of ``service``, newest first."""
    rows = []
    for status in TASK_STATUSES:
        arns = _paginate(
            ctx.client("ecs"),
            "list_tasks",
            "taskArns",
            cluster=cluster,
            serviceName=short_name(service),
            desiredStatus=status,
        )
        rows.extend(
            TaskRow.from_description(task, status)
            for task in describe_tasks(ctx, cluster, arns)
        )
    rows.sort(key=lambda row: row.sort_key, reverse=True)
    logger.info("Found %d tasks for service %s", len(rows), short_name(service))
    return rows


def choose_task(ctx, cluster, service):
    rows = list_tasks(ctx, cluster, service)
    options = SelectorOptions(
        prompt="Task> ",
        with_nth="2..",
        sort=False,
        header="STATUS\tTIMESTAMP\tTASK",
    )
    choice = ctx.selector.select([row.line() for row in rows], options)
    return require(choice, "task").split("\t", 1)[0]


def resolve_container_instance(ctx, cluster, task_arn):
    tasks = describe_tasks(ctx, cluster, [task_arn])
    arn = tasks[0].get("containerInstanceArn") if tasks else None
    return require(arn, "container-instance")


def resolve_ec2_instance_id(ctx, cluster, container_instance_arn):
    response = ctx.client("ecs").describe_container_instances(
        cluster=cluster, containerInstances=[container_instance_arn]
    )
    instances = response.get("containerInstances", [])
    instance_id = instances[0].get("ec2InstanceId") if instances else None
    return require(instance_id, "ec2-instance")


def describe_instance(ctx, instance_id):
    """Return ``(private_ip, image_id)`` for an EC2 instance."""
    response = ctx.client("ec2").describe_instances(InstanceIds=[instance_id])
    for reservation in response.get("Reservations", []):
        for instance in reservation.get("Instances", []):
            return (
                require(instance.get("PrivateIpAddress"), "address"),
                instance.get("ImageId"),
            )
    raise NothingSelected("address")


def describe_image(ctx, image_id):
    images = ctx.client("ec2").describe_images(ImageIds=[image_id]).get("Images", [])
    return require(images[0] if images else None, "image")


def infer_login_user(image, settings):
    """Guess the default login user from the image name and tag values.

    Best effort: a case-insensitive match of an OS marker (e.g. "ubuntu")
    anywhere in the name or a tag value picks that OS's user.
    """
    haystack = [image.get("Name") or ""]
    haystack.extend(tag.get("Value") or "" for tag in image.get("Tags", []))
    haystack = " ".join(haystack).lower()
    for marker, user in settings.os_users.items():
        if marker.lower() in haystack:
            return user
    return settings.default_user


def resolve_target(ctx):
    cluster = choose_cluster(ctx)
    service = choose_service(ctx, cluster)
    task_arn = choose_task(ctx, cluster, service)
    container_instance = resolve_container_instance(ctx, cluster, task_arn)
    instance_id = resolve_ec2_instance_id(ctx, cluster, container_instance)
    address, image_id = describe_instance(ctx, instance_id)
    image = describe_image(ctx, require(image_id, "image"))
    user = infer_login_user(image, ctx.settings)
    logger.info("Task %s runs on %s (%s)", short_name(task_arn), instance_id, address)
    return Target(address=address, user=user, instance_id=instance_id)
