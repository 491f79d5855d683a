"""Tests for the WWW-Authenticate challenge parser."""

from urllib.parse import parse_qs, urlsplit

import pytest

from tagcheck_cli.errors import MalformedChallenge
from tagcheck_cli.registry.challenge import AuthChallenge, parse_challenge

_HEADER = (
    'Bearer realm="https://auth.example.com/token",'
    'service="registry.example.com",scope="repository:x:pull"'
)


class TestParseChallenge:
    def test_realm_and_params(self):
        """Test realm is popped and the rest kept as params."""
        challenge = parse_challenge(_HEADER)
        assert challenge.realm_url == "https://auth.example.com/token"
        assert challenge.params == {
            "service": ["registry.example.com"],
            "scope": ["repository:x:pull"],
        }
        assert "realm" not in challenge.params

    def test_without_bearer_prefix(self):
        """Test a header without the Bearer prefix is accepted."""
        challenge = parse_challenge('realm="https://auth.example.com/token"')
        assert challenge.realm_url == "https://auth.example.com/token"
        assert challenge.params == {}

    def test_multi_action_scope_keeps_extra_key(self):
        """Test a comma inside scope leaves an empty-valued key."""
        challenge = parse_challenge(
            'Bearer realm="https://auth.example.com/token",scope="repository:x:pull,push"'
        )
        assert challenge.params["scope"] == ["repository:x:pull"]
        assert challenge.params["push"] == [""]

    @pytest.mark.parametrize("header", ["", None])
    def test_empty_header(self, header):
        """Test a missing header is malformed."""
        with pytest.raises(MalformedChallenge, match="no WWW-Authenticate data"):
            parse_challenge(header)

    def test_invalid_escape(self):
        """Test a bad percent escape is malformed."""
        with pytest.raises(MalformedChallenge):
            parse_challenge('Bearer realm="https://auth.example.com/%zz"')

    def test_semicolon(self):
        """Test a semicolon is malformed."""
        with pytest.raises(MalformedChallenge):
            parse_challenge('Bearer realm="https://auth.example.com";service="x"')

    def test_missing_realm(self):
        """Test a challenge without realm is malformed."""
        with pytest.raises(MalformedChallenge, match="no realm"):
            parse_challenge('Bearer service="registry.example.com"')


class TestTokenUrl:
    def test_params_encoded(self):
        """Test the token URL carries the challenge params."""
        url = parse_challenge(_HEADER).token_url()
        parts = urlsplit(url)
        assert f"{parts.scheme}://{parts.netloc}{parts.path}" == "https://auth.example.com/token"
        assert parse_qs(parts.query) == {
            "service": ["registry.example.com"],
            "scope": ["repository:x:pull"],
        }

    def test_no_params(self):
        """Test the token URL is the bare realm without params."""
        assert AuthChallenge("https://auth.example.com/token").token_url() == (
            "https://auth.example.com/token"
        )
