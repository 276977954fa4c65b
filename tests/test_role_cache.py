import os
from unittest.mock import MagicMock

from ec2hop.role_cache import RoleCache


class TestRoleCache:
    def test_path_for(self, tmp_path):
        cache = RoleCache(str(tmp_path))
        assert cache.path_for("prod") == os.path.join(str(tmp_path), "prod.roles")

    def test_miss_queries_and_writes_sorted_unique(self, tmp_path):
        cache_dir = tmp_path / "nested" / "cache"
        cache = RoleCache(str(cache_dir))
        loader = MagicMock(return_value=["web", "db", "web", "batch"])

        roles = cache.get_or_create("prod", loader)

        assert roles == ["batch", "db", "web"]
        loader.assert_called_once_with()
        assert (cache_dir / "prod.roles").read_text() == "batch\ndb\nweb\n"

    def test_hit_does_not_query(self, tmp_path):
        (tmp_path / "prod.roles").write_text("db\nweb\n")
        cache = RoleCache(str(tmp_path))
        loader = MagicMock()

        for _ in range(3):
            assert cache.get_or_create("prod", loader) == ["db", "web"]
        loader.assert_not_called()

    def test_deleted_file_is_regenerated(self, tmp_path):
        cache = RoleCache(str(tmp_path))
        cache.get_or_create("prod", lambda: ["old"])
        os.remove(cache.path_for("prod"))

        assert cache.get_or_create("prod", lambda: ["web", "api"]) == ["api", "web"]

    def test_environments_are_separate(self, tmp_path):
        cache = RoleCache(str(tmp_path))
        cache.get_or_create("prod", lambda: ["web"])
        assert cache.get_or_create("staging", lambda: ["db"]) == ["db"]
        assert cache.read("prod") == ["web"]

    def test_empty_result_writes_empty_file(self, tmp_path):
        cache = RoleCache(str(tmp_path))
        assert cache.get_or_create("dev", lambda: []) == []
        assert (tmp_path / "dev.roles").read_text() == ""

    def test_write_overwrites(self, tmp_path):
        cache = RoleCache(str(tmp_path))
        cache.write("prod", ["a", "b", "c"])
        cache.write("prod", ["z"])
        assert cache.read("prod") == ["z"]
