import logging
import os

logger = logging.getLogger(__name__)


class RoleCache:
    """Role names per environment, one ``<env>.roles`` file each.

    Entries never expire; delete the file to force a fresh lookup. There is no
    locking, so two runs for the same environment may both query and write.
    """

    SUFFIX = ".roles"

    def __init__(self, cache_dir):
        self.cache_dir = cache_dir

    def path_for(self, env):
        return os.path.join(self.cache_dir, f"{env}{self.SUFFIX}")

    def exists(self, env):
        return os.path.exists(self.path_for(env))

    def read(self, env):
        with open(self.path_for(env), "r") as f:
            return [line.strip() for line in f if line.strip()]

    def write(self, env, roles):
        os.makedirs(self.cache_dir, exist_ok=True)
        with open(self.path_for(env), "w") as f:
            f.writelines(f"{role}\n" for role in roles)

    def get_or_create(self, env, loader):
        if self.exists(env):
            logger.debug("Role cache hit: %s", self.path_for(env))
        else:
            roles = sorted(set(loader()))
            logger.info(
                "Caching %d roles for '%s' in %s", len(roles), env, self.path_for(env)
            )
            self.write(env, roles)
        return self.read(env)
