"""Unit tests for bc_gateway Pydantic schemas."""

import pytest
from pydantic import ValidationError

from src.bc_gateway.user.schemas import RegisterRequest


def _register(**overrides: str) -> RegisterRequest:
    fields = {
        "username": "alice",
        "email": "alice@example.com",
        "password": "SecureP4ss",
        "name": "Alice Smith",
    }
    fields.update(overrides)
    return RegisterRequest(**fields)


class TestRegisterRequest:
    def test_valid_input(self) -> None:
        req = _register()
        assert req.username == "alice"
        assert req.name == "Alice Smith"

    def test_name_is_stripped(self) -> None:
        assert _register(name="  Bob  ").name == "Bob"

    def test_blank_name_rejected(self) -> None:
        with pytest.raises(ValidationError):
            _register(name="   ")

    def test_name_required(self) -> None:
        with pytest.raises(ValidationError):
            RegisterRequest(
                username="alice", email="alice@example.com", password="SecureP4ss"
            )  # type: ignore[call-arg]

    @pytest.mark.parametrize("username", ["ab", "a" * 65, "alice!", "al ice"])
    def test_bad_usernames(self, username: str) -> None:
        with pytest.raises(ValidationError):
            _register(username=username)

    def test_invalid_email(self) -> None:
        with pytest.raises(ValidationError):
            _register(email="not-an-email")

    @pytest.mark.parametrize(
        ("password", "reason"),
        [
            ("Sh0rt", "at least 8"),
            ("alllowercase1", "uppercase"),
            ("ALLUPPERCASE1", "lowercase"),
            ("NoDigitsHere", "digit"),
        ],
    )
    def test_password_rules(self, password: str, reason: str) -> None:
        with pytest.raises(ValidationError, match=reason):
            _register(password=password)
