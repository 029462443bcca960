"""Tests for Authorization header helpers."""

from __future__ import annotations

import base64

import pytest

from rest_api_provider import ConfigError
from rest_api_provider.auth import basic_credentials, bearer_token


class TestBearerToken:
    def test_formats_token(self) -> None:
        assert bearer_token(" abc123 ") == "Bearer abc123"

    def test_rejects_empty_token(self) -> None:
        with pytest.raises(ConfigError):
            bearer_token("   ")


class TestBasicCredentials:
    def test_encodes_credentials(self) -> None:
        value = basic_credentials("user", "p:ss")
        scheme, encoded = value.split(" ")
        assert scheme == "Basic"
        assert base64.b64decode(encoded).decode("utf-8") == "user:p:ss"

    def test_rejects_colon_in_username(self) -> None:
        with pytest.raises(ConfigError, match="colon"):
            basic_credentials("us:er", "x")
