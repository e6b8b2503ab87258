"""Tests for core models, exceptions, and settings."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from family_wallet.core.config import (
    DEFAULT_TTL_BUMP_SECONDS,
    DEFAULT_TTL_THRESHOLD_SECONDS,
    load_settings,
    parse_identity_keys,
)
from family_wallet.core.exceptions import (
    AlreadyInitializedError,
    ConfigurationError,
    ErrorKind,
    FamilyWalletError,
    InvalidInputError,
    NotInitializedError,
    RegistryError,
    UnauthorizedError,
)
from family_wallet.core.models import Member


class TestMember:
    """Tests for the Member model."""

    def test_member_creation(self) -> None:
        member = Member(identity="GALICE", name="Alice", spending_limit=1000, role="parent")
        assert member.to_record() == {
            "identity": "GALICE",
            "name": "Alice",
            "spending_limit": 1000,
            "role": "parent",
        }

    def test_allows_is_inclusive(self) -> None:
        member = Member(identity="GALICE", name="Alice", spending_limit=1000, role="parent")
        assert member.allows(1000)
        assert not member.allows(1001)

    def test_member_rejects_invalid_fields(self) -> None:
        with pytest.raises(ValidationError):
            Member(identity="GALICE", name="Alice", spending_limit=0, role="parent")
        with pytest.raises(ValidationError):
            Member(identity="GALICE", name="", spending_limit=10, role="parent")


class TestExceptions:
    """Tests for the exception hierarchy."""

    @pytest.mark.parametrize(
        ("error_cls", "kind"),
        [
            (AlreadyInitializedError, ErrorKind.ALREADY_INITIALIZED),
            (NotInitializedError, ErrorKind.NOT_INITIALIZED),
            (UnauthorizedError, ErrorKind.UNAUTHORIZED),
            (InvalidInputError, ErrorKind.INVALID_INPUT),
        ],
    )
    def test_fatal_errors_carry_kind(self, error_cls, kind: ErrorKind) -> None:
        error = error_cls()
        assert error.kind == kind
        assert isinstance(error, RegistryError)
        assert isinstance(error, FamilyWalletError)

    def test_error_kinds(self) -> None:
        """Five distinct kinds are defined, including non-fatal not-found."""
        assert len(ErrorKind) == 5
        assert ErrorKind.NOT_FOUND.value == "not_found"

    def test_details_in_str(self) -> None:
        error = UnauthorizedError("Only the owner can call add_member", operation="add_member", identity="GBOB")
        assert str(error) == "Only the owner can call add_member (operation=add_member, identity=GBOB)"

    def test_to_dict(self) -> None:
        error = InvalidInputError("Spending limit must be positive", field="spending_limit")
        data = error.to_dict()

        assert data["error_type"] == "InvalidInputError"
        assert data["kind"] == "invalid_input"
        assert data["details"]["field"] == "spending_limit"


class TestSettings:
    """Tests for environment configuration."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for var in (
            "FW_STATE_DIR",
            "FW_AUDIT_DIR",
            "FW_TTL_THRESHOLD_SECONDS",
            "FW_TTL_BUMP_SECONDS",
            "FW_IDENTITY_KEYS",
            "FW_LOG_LEVEL",
        ):
            monkeypatch.delenv(var, raising=False)

        settings = load_settings()
        assert settings.state_dir == Path("var/wallet")
        assert settings.audit_dir == Path("var/audit")
        assert settings.lifetime.threshold_seconds == DEFAULT_TTL_THRESHOLD_SECONDS
        assert settings.lifetime.bump_seconds == DEFAULT_TTL_BUMP_SECONDS
        assert settings.identity_keys == {}
        assert settings.log_level == "WARNING"

    def test_from_environment(self, monkeypatch: pytest.MonkeyPatch, temp_dir: Path) -> None:
        monkeypatch.setenv("FW_STATE_DIR", str(temp_dir / "state"))
        monkeypatch.setenv("FW_TTL_THRESHOLD_SECONDS", "60")
        monkeypatch.setenv("FW_TTL_BUMP_SECONDS", "600")
        monkeypatch.setenv("FW_IDENTITY_KEYS", "GOWNER=s1, GALICE=s2")
        monkeypatch.setenv("FW_LOG_LEVEL", "debug")

        settings = load_settings()
        assert settings.state_dir == temp_dir / "state"
        assert settings.lifetime.threshold_seconds == 60
        assert settings.lifetime.bump_seconds == 600
        assert settings.identity_keys == {"GOWNER": "s1", "GALICE": "s2"}
        assert settings.log_level == "DEBUG"

    @pytest.mark.parametrize(
        ("var", "value"),
        [
            ("FW_TTL_BUMP_SECONDS", "soon"),
            ("FW_TTL_BUMP_SECONDS", "-5"),
            ("FW_LOG_LEVEL", "LOUD"),
        ],
    )
    def test_invalid_values(self, monkeypatch: pytest.MonkeyPatch, var: str, value: str) -> None:
        monkeypatch.setenv(var, value)
        with pytest.raises(ConfigurationError):
            load_settings()

    def test_threshold_above_bump(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FW_TTL_THRESHOLD_SECONDS", "1000")
        monkeypatch.setenv("FW_TTL_BUMP_SECONDS", "10")
        with pytest.raises(ConfigurationError, match="cannot exceed"):
            load_settings()

    def test_malformed_identity_keys(self) -> None:
        with pytest.raises(ConfigurationError):
            parse_identity_keys("GOWNER")
        assert parse_identity_keys("") == {}
