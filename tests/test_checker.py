import pytest
from unittest.mock import patch

from conftest import StubProbe
from ec2hop.checker import ConfigChecker, SystemProbe
from ec2hop.exceptions import DependencyError


class TestSystemProbe:
    @patch("ec2hop.checker.shutil.which")
    def test_has(self, mock_which):
        mock_which.side_effect = lambda name: "/usr/bin/fzf" if name == "fzf" else None
        probe = SystemProbe()
        assert probe.has("fzf") is True
        assert probe.has("mssh") is False


class TestConfigChecker:
    def test_all_required_present(self):
        ConfigChecker(StubProbe("fzf", "ssh")).check_dependencies(
            required=("fzf", "ssh")
        )

    def test_missing_required_names_program_and_fix(self):
        checker = ConfigChecker(StubProbe("ssh"))
        with pytest.raises(DependencyError, match="'fzf' is required") as exc:
            checker.check_dependencies(required=("fzf", "ssh"))
        assert "junegunn/fzf" in str(exc.value)
        assert exc.value.exit_code == 1

    def test_any_of_satisfied_by_one(self):
        ConfigChecker(StubProbe("fzf", "mssh")).check_dependencies(
            required=("fzf",), any_of=("ssh", "mssh")
        )

    def test_any_of_none_present(self):
        checker = ConfigChecker(StubProbe("fzf"))
        with pytest.raises(DependencyError, match="One of ssh, mssh is required"):
            checker.check_dependencies(required=("fzf",), any_of=("ssh", "mssh"))

    def test_validate_all(self):
        results = ConfigChecker(StubProbe("fzf", "ssh")).validate_all()
        assert results == {"fzf": True, "ssh": True, "mssh": False}
