"""Unit tests for bearer token authentication module."""

from unittest.mock import MagicMock

import pytest
from fastapi import HTTPException

from app.core.auth import (
    extract_bearer_token,
    parse_api_keys,
    validate_api_key,
    verify_bearer_token,
)
from app.core.config import AppSettings
from app.core.errors import AuthenticationAppError


def _app_settings(*, required: bool = True, keys: str | None = "valid-key-1,valid-key-2") -> AppSettings:
    return AppSettings(api_key_required=required, api_keys=keys)


def _request(app_settings: AppSettings) -> MagicMock:
    request = MagicMock()
    request.app.state.settings.app = app_settings
    return request


class TestParseAPIKeys:
    """Test API key parsing utility function."""

    def test_parse_single_key(self) -> None:
        assert parse_api_keys("my-secret-key") == {"my-secret-key"}

    def test_parse_multiple_keys(self) -> None:
        assert parse_api_keys("key1,key2,key3") == {"key1", "key2", "key3"}

    def test_parse_keys_with_whitespace(self) -> None:
        """Test that whitespace is trimmed from keys."""
        assert parse_api_keys("key1 , key2  ,  key3") == {"key1", "key2", "key3"}

    def test_parse_none_returns_empty_set(self) -> None:
        assert parse_api_keys(None) == set()

    def test_parse_empty_string_returns_empty_set(self) -> None:
        assert parse_api_keys("") == set()

    def test_parse_whitespace_only_returns_empty_set(self) -> None:
        assert parse_api_keys("   ,  ,  ") == set()

    def test_parse_removes_duplicate_keys(self) -> None:
        assert parse_api_keys("key1,key2,key1,key3,key2") == {"key1", "key2", "key3"}


class TestExtractBearerToken:
    @pytest.mark.parametrize(
        ("header", "expected"),
        [
            ("Bearer abc", "abc"),
            ("bearer abc", "abc"),
            ("BEARER   abc  ", "abc"),
            ("Bearer ", None),
            ("Basic abc", None),
            ("abc", None),
            ("", None),
            (None, None),
        ],
    )
    def test_extract(self, header, expected) -> None:
        assert extract_bearer_token(header) == expected


class TestValidateAPIKey:
    """Test core token validation logic."""

    def test_validate_bypassed_when_auth_disabled(self) -> None:
        """Test that validation is skipped when APP_API_KEY_REQUIRED=false."""
        app_settings = _app_settings(required=False, keys=None)

        validate_api_key("any-random-key", app_settings)
        validate_api_key("", app_settings)

    @pytest.mark.parametrize("keys", [None, ""])
    def test_validate_raises_when_no_keys_configured(self, keys) -> None:
        with pytest.raises(AuthenticationAppError) as exc_info:
            validate_api_key("some-key", _app_settings(keys=keys))

        assert exc_info.value.code == "api_keys_not_configured"
        assert "no valid keys are configured" in exc_info.value.message

    def test_validate_accepts_valid_key(self) -> None:
        app_settings = _app_settings()

        validate_api_key("valid-key-1", app_settings)
        validate_api_key("valid-key-2", app_settings)

    def test_validate_rejects_invalid_key(self) -> None:
        with pytest.raises(AuthenticationAppError) as exc_info:
            validate_api_key("invalid-key", _app_settings())

        assert exc_info.value.code == "invalid_api_key"
        assert exc_info.value.message == "Invalid bearer token"

    def test_validate_handles_whitespace_in_configured_keys(self) -> None:
        """Test that configured keys with whitespace are handled correctly."""
        app_settings = _app_settings(keys=" key1 , key2 , key3 ")

        validate_api_key("key1", app_settings)
        validate_api_key("key2", app_settings)

        with pytest.raises(AuthenticationAppError):
            validate_api_key(" key1 ", app_settings)


class TestVerifyBearerTokenDependency:
    """Test FastAPI dependency for bearer verification."""

    @pytest.mark.asyncio
    async def test_verify_bypassed_when_auth_disabled(self) -> None:
        request = _request(_app_settings(required=False, keys=None))

        await verify_bearer_token(request, authorization=None)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("header", [None, "valid-key-1", "Token valid-key-1", "Bearer "])
    async def test_verify_raises_401_when_header_missing_or_malformed(self, header) -> None:
        with pytest.raises(HTTPException) as exc_info:
            await verify_bearer_token(_request(_app_settings()), authorization=header)

        assert exc_info.value.status_code == 401
        assert exc_info.value.headers == {"WWW-Authenticate": "Bearer"}

    @pytest.mark.asyncio
    async def test_verify_raises_403_when_token_invalid(self) -> None:
        with pytest.raises(HTTPException) as exc_info:
            await verify_bearer_token(_request(_app_settings()), authorization="Bearer wrong-key")

        assert exc_info.value.status_code == 403
        assert exc_info.value.detail == "Invalid bearer token"

    @pytest.mark.asyncio
    async def test_verify_accepts_valid_token(self) -> None:
        request = _request(_app_settings())

        await verify_bearer_token(request, authorization="Bearer valid-key-1")
        await verify_bearer_token(request, authorization="Bearer valid-key-2")

    @pytest.mark.asyncio
    async def test_verify_raises_403_when_keys_not_configured(self) -> None:
        with pytest.raises(HTTPException) as exc_info:
            await verify_bearer_token(
                _request(_app_settings(keys=None)), authorization="Bearer some-key"
            )

        assert exc_info.value.status_code == 403
        assert "no valid keys are configured" in exc_info.value.detail
