"""Tests for SSH config parsing and cluster lookup."""

from pathlib import Path

import pytest

from clustrz.config import Config, SSHConfigParser

SSH_CONFIG = """\
Host *
    User rails_deploy

# voting servers
Host vot004
    HostName vot004.example.com

Host vot005
    HostName 10.0.0.5
    User admin
    Port 2222
    IdentityFile ~/.ssh/id_ed25519

Host *.internal
    User nobody

Host bare
"""


@pytest.fixture
def ssh_config(tmp_path: Path) -> Path:
    path = tmp_path / "config"
    path.write_text(SSH_CONFIG)
    return path


class TestSSHConfigParser:
    """Test parsing ~/.ssh/config into nodes."""

    def test_parses_hosts(self, ssh_config: Path) -> None:
        nodes = SSHConfigParser(ssh_config).parse()

        assert list(nodes) == ["vot004", "vot005", "bare"]
        assert nodes["vot004"].host == "vot004.example.com"
        assert nodes["vot004"].user == "rails_deploy"

    def test_host_specific_values(self, ssh_config: Path) -> None:
        vot005 = SSHConfigParser(ssh_config).parse()["vot005"]

        assert vot005.user == "admin"
        assert vot005.port == 2222
        assert vot005.identity_file == str(Path.home() / ".ssh" / "id_ed25519")

    def test_hostname_defaults_to_alias(self, ssh_config: Path) -> None:
        assert SSHConfigParser(ssh_config).parse()["bare"].host == "bare"

    def test_missing_file(self, tmp_path: Path) -> None:
        assert SSHConfigParser(tmp_path / "nope").parse() == {}

    def test_invalid_port(self, tmp_path: Path) -> None:
        path = tmp_path / "config"
        path.write_text("Host a\n    HostName a.example.com\n    Port ssh\n")

        assert SSHConfigParser(path).parse()["a"].port == 22


class TestConfigCluster:
    """Test building clusters from SSH config."""

    def test_all_hosts(self, ssh_config: Path) -> None:
        config = Config(parser=SSHConfigParser(ssh_config))

        cluster = config.cluster("all")

        assert cluster.name == "all"
        assert len(cluster) == 3

    def test_selected_hosts_in_order(self, ssh_config: Path) -> None:
        config = Config(parser=SSHConfigParser(ssh_config))

        cluster = config.cluster("voting", ["vot005", "vot004"])

        assert cluster.hosts == ["10.0.0.5", "vot004.example.com"]

    def test_unknown_host(self, ssh_config: Path) -> None:
        config = Config(parser=SSHConfigParser(ssh_config))

        with pytest.raises(KeyError, match="vot999"):
            config.cluster("voting", ["vot004", "vot999"])
