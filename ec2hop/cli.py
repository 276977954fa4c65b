import argparse
import logging
import sys

from botocore.exceptions import BotoCoreError, ClientError

from . import ec2_resolver, ecs_resolver
from .aws_sessions import AWSSessions
from .checker import ConfigChecker, SystemProbe
from .config_loader import ConfigLoader
from .context import ResolveContext
from .dispatcher import ClientKind, Dispatcher, Target, choose_client
from .exceptions import Ec2HopError, NothingSelected
from .role_cache import RoleCache
from .selector import FzfSelector

logger = logging.getLogger(__name__)

EXIT_USAGE = 1
EXIT_ILLEGAL_OPTION = 2
EXIT_INTERRUPTED = 130


class UsageParser(argparse.ArgumentParser):
    """Argument errors (missing value, conflicting flags) are bad usage: exit 1."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(EXIT_USAGE, f"{self.prog}: error: {message}\n")


def build_ec2_parser():
    parser = UsageParser(
        prog="ec2-ssh",
        allow_abbrev=False,
        description="Pick a running EC2 instance by environment and role, then ssh in.",
    )
    parser.add_argument(
        "-e",
        "--env",
        help="Environment tag to search (default: default_env from config, or prod)",
    )
    parser.add_argument(
        "--show",
        action="store_true",
        help="Print the instance address instead of connecting",
    )
    return parser


def build_ecs_parser():
    parser = UsageParser(
        prog="ecs-ssh",
        allow_abbrev=False,
        description=(
            "Pick an ECS cluster, service and task, then ssh to the EC2 "
            "instance hosting it. EC2_SSH_BINARY=ssh|mssh sets the default client."
        ),
    )
    parser.add_argument(
        "-j",
        "--just-show",
        action="store_true",
        help="Print host, user and instance instead of connecting",
    )
    clients = parser.add_mutually_exclusive_group()
    clients.add_argument(
        "--ssh",
        dest="client",
        action="store_const",
        const=ClientKind.STANDARD,
        help="Connect with ssh to the private address",
    )
    clients.add_argument(
        "--mssh",
        dest="client",
        action="store_const",
        const=ClientKind.ENHANCED,
        help="Connect with mssh (EC2 Instance Connect) to the instance id",
    )
    return parser


def parse_args(parser, argv):
    """Parse ``argv``; unknown flags exit 2, other usage errors exit 1."""
    args, extras = parser.parse_known_args(argv)
    if extras:
        parser.print_usage(sys.stderr)
        if any(extra.startswith("-") for extra in extras):
            sys.stderr.write(f"{parser.prog}: illegal option {extras[0]}\n")
            sys.exit(EXIT_ILLEGAL_OPTION)
        sys.stderr.write(f"{parser.prog}: unexpected argument {extras[0]}\n")
        sys.exit(EXIT_USAGE)
    return args


def configure_logging(level):
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def run(pipeline):
    """Run ``pipeline`` and turn its outcome into a process exit status."""
    try:
        return pipeline()
    except NothingSelected as e:
        logger.info("Stopping: %s", e)
        return e.exit_code
    except Ec2HopError as e:
        print(f"Error: {e}", file=sys.stderr)
        return e.exit_code
    except (BotoCoreError, ClientError) as e:
        print(f"Error: AWS request failed: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return EXIT_INTERRUPTED


def _prepare(settings, required=(), any_of=(), probe=None, sessions=None):
    configure_logging(settings.log_level)
    checker = ConfigChecker(probe)
    logger.debug("Installed programs: %s", checker.validate_all())
    checker.check_dependencies(required=required, any_of=any_of)
    session = (sessions or AWSSessions()).get_session(
        profile_name=settings.profile, region_name=settings.region
    )
    return settings, session


def ec2_ssh_main(argv=None, selector=None, probe=None, sessions=None, loader=None):
    args = parse_args(build_ec2_parser(), argv)
    loader = loader or ConfigLoader()
    probe = probe or SystemProbe()

    def pipeline():
        settings, session = _prepare(
            loader.load_config(use_ssh_binary=False),
            required=("fzf", "ssh"),
            probe=probe,
            sessions=sessions,
        )
        ctx = ResolveContext(
            settings=settings,
            session=session,
            selector=selector or FzfSelector(),
            probe=probe,
            env=args.env or settings.default_env,
            show=args.show,
        )
        role = ec2_resolver.choose_role(ctx, RoleCache(settings.cache_path))
        row = ec2_resolver.choose_instance(ctx, role)
        target = Target(address=row.address)
        return Dispatcher().dispatch(target, ClientKind.STANDARD, show=ctx.show)

    return run(pipeline)


def ecs_ssh_main(argv=None, selector=None, probe=None, sessions=None, loader=None):
    args = parse_args(build_ecs_parser(), argv)
    loader = loader or ConfigLoader()
    probe = probe or SystemProbe()

    def pipeline():
        settings, session = _prepare(
            loader.load_config(),
            required=("fzf",),
            any_of=("ssh", "mssh"),
            probe=probe,
            sessions=sessions,
        )
        ctx = ResolveContext(
            settings=settings,
            session=session,
            selector=selector or FzfSelector(),
            probe=probe,
            show=args.just_show,
            client_override=args.client,
        )
        target = ecs_resolver.resolve_target(ctx)
        kind = choose_client(ctx.client_override, settings.ssh_binary, probe)
        dispatcher = Dispatcher(profile=settings.profile, region=settings.region)
        return dispatcher.dispatch(target, kind, show=ctx.show)

    return run(pipeline)


def ec2_ssh():
    sys.exit(ec2_ssh_main())


def ecs_ssh():
    sys.exit(ecs_ssh_main())
