"""Tests for registry credential lookup."""

import json
import os
from unittest.mock import patch

from tagcheck_cli.registry.auth import Credentials, resolve_credentials


class TestCredentials:
    def test_declined(self):
        """Test an empty username means declined."""
        assert Credentials().declined is True
        assert Credentials("user", "").declined is False


class TestResolveCredentials:
    """Test credential lookup for non-interactive runs."""

    @patch("tagcheck_cli.registry.auth.Path.home")
    def test_resolve_credentials_aliases(self, mock_home, tmp_path):
        """Test resolve_credentials handles Docker Hub aliases."""
        mock_home.return_value = tmp_path

        # Test CLI override with alias
        creds = resolve_credentials(
            "registry-1.docker.io", cli_auths=["docker.io=alias_user:alias_pass"]
        )
        assert creds == Credentials("alias_user", "alias_pass")

        # Test Env Var with alias
        env = {
            "TAGCHECK_AUTH_DOCKER_IO_USERNAME": "env_alias_user",
            "TAGCHECK_AUTH_DOCKER_IO_PASSWORD": "env_alias_pass",
        }
        with patch.dict(os.environ, env, clear=True):
            creds = resolve_credentials("registry-1.docker.io")
            assert creds == Credentials("env_alias_user", "env_alias_pass")

    @patch("tagcheck_cli.registry.auth.Path.home")
    def test_resolve_credentials_precedence(self, mock_home, tmp_path):
        """Test precedence: CLI > Domain Env > Global Env > config.json."""
        mock_home.return_value = tmp_path
        docker_dir = tmp_path / ".docker"
        docker_dir.mkdir()
        (docker_dir / "config.json").write_text(
            json.dumps(
                {
                    "auths": {
                        "registry.example.com": {
                            "auth": "ZG9ja2VyX3VzZXI6ZG9ja2VyX3Bhc3M="  # docker_user:docker_pass
                        }
                    }
                }
            ),
            encoding="utf-8",
        )

        # 1. CLI overrides
        env = {
            "TAGCHECK_AUTH_REGISTRY_EXAMPLE_COM_USERNAME": "domain_user",
            "TAGCHECK_AUTH_REGISTRY_EXAMPLE_COM_PASSWORD": "domain_pass",
            "TAGCHECK_USERNAME": "global_user",
            "TAGCHECK_PASSWORD": "global_pass",
        }
        with patch.dict(os.environ, env, clear=True):
            creds = resolve_credentials(
                "registry.example.com", cli_auths=["registry.example.com=cli_user:cli_pass"]
            )
            assert creds == Credentials("cli_user", "cli_pass")

            # 2. Domain-specific env vars
            creds = resolve_credentials("registry.example.com")
            assert creds == Credentials("domain_user", "domain_pass")

        # 3. Global env vars
        env = {
            "TAGCHECK_USERNAME": "global_user",
            "TAGCHECK_PASSWORD": "global_pass",
        }
        with patch.dict(os.environ, env, clear=True):
            creds = resolve_credentials("registry.example.com")
            assert creds == Credentials("global_user", "global_pass")

        # 4. Docker config.json
        with patch.dict(os.environ, {}, clear=True):
            creds = resolve_credentials("registry.example.com")
            assert creds == Credentials("docker_user", "docker_pass")

    @patch("tagcheck_cli.registry.auth.Path.home")
    def test_nothing_found(self, mock_home, tmp_path):
        """Test None is returned when no source has credentials."""
        mock_home.return_value = tmp_path
        with patch.dict(os.environ, {}, clear=True):
            assert resolve_credentials("registry.example.com", cli_auths=["bad-entry"]) is None

    @patch("tagcheck_cli.registry.auth.Path.home")
    def test_unreadable_config(self, mock_home, tmp_path):
        """Test a broken docker config is ignored."""
        mock_home.return_value = tmp_path
        (tmp_path / ".docker").mkdir()
        (tmp_path / ".docker" / "config.json").write_text("{not json", encoding="utf-8")
        with patch.dict(os.environ, {}, clear=True):
            assert resolve_credentials("registry.example.com") is None

    @patch("tagcheck_cli.registry.auth.Path.home")
    def test_docker_hub_index_key(self, mock_home, tmp_path):
        """Test Docker Hub credentials under the legacy index key."""
        mock_home.return_value = tmp_path
        (tmp_path / ".docker").mkdir()
        (tmp_path / ".docker" / "config.json").write_text(
            json.dumps({"auths": {"https://index.docker.io/v1/": {"auth": "aHViOnB3"}}}),  # hub:pw
            encoding="utf-8",
        )
        with patch.dict(os.environ, {}, clear=True):
            assert resolve_credentials("registry-1.docker.io") == Credentials("hub", "pw")
