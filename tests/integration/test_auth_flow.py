"""Integration tests for the authentication flow with a real record cache."""

from unittest.mock import Mock, patch

import pytest
from azure.identity import AuthenticationRecord

from src.auth import AuthenticationError, AuthRecordCache, GraphAuthenticator


def make_record() -> AuthenticationRecord:
    return AuthenticationRecord(
        tenant_id="tenant-id",
        client_id="client-id",
        authority="login.microsoftonline.com",
        home_account_id="object-id.tenant-id",
        username="user@example.com",
    )


@pytest.mark.asyncio
async def test_second_run_reuses_saved_record(tmp_path) -> None:
    """The record saved by the first sign-in authenticates the next run without a prompt."""
    record_cache = AuthRecordCache(tmp_path / "token.json")

    with (
        patch("src.auth.authenticator.GraphServiceClient"),
        patch("src.auth.authenticator.DeviceCodeCredential") as credential_cls,
    ):
        credential_cls.return_value.authenticate.return_value = make_record()
        first = GraphAuthenticator("client-id", "tenant-id", record_cache=record_cache)
        await first.authenticate()

        assert credential_cls.return_value.authenticate.call_count == 1
        assert (tmp_path / "token.json").exists()

        second = GraphAuthenticator("client-id", "tenant-id", record_cache=record_cache)
        await second.authenticate()

    # No second interactive exchange
    assert credential_cls.return_value.authenticate.call_count == 1
    reused = credential_cls.call_args.kwargs["authentication_record"]
    assert reused.username == "user@example.com"
    assert reused.home_account_id == "object-id.tenant-id"


@pytest.mark.asyncio
async def test_corrupt_record_fails_without_prompt(tmp_path) -> None:
    record_file = tmp_path / "token.json"
    record_file.write_text("{corrupt")
    authenticator = GraphAuthenticator("client-id", "tenant-id", record_cache=AuthRecordCache(record_file))

    with patch("src.auth.authenticator.DeviceCodeCredential") as credential_cls:
        with pytest.raises(AuthenticationError):
            await authenticator.authenticate()

    credential_cls.assert_not_called()


@pytest.mark.asyncio
async def test_prompt_callback_reaches_device_flow(tmp_path) -> None:
    """The display callback is invoked by the credential, once, before sign-in completes."""
    shown = []

    def prompt(verification_uri, user_code, expires_on) -> None:
        shown.append((verification_uri, user_code))

    def fake_authenticate(**kwargs):
        credential_cls.call_args.kwargs["prompt_callback"]("https://microsoft.com/devicelogin", "CODE-1", None)
        return make_record()

    with (
        patch("src.auth.authenticator.GraphServiceClient"),
        patch("src.auth.authenticator.DeviceCodeCredential") as credential_cls,
    ):
        credential_cls.return_value = Mock()
        credential_cls.return_value.authenticate.side_effect = fake_authenticate
        authenticator = GraphAuthenticator(
            "client-id",
            "tenant-id",
            record_cache=AuthRecordCache(tmp_path / "token.json"),
            prompt_callback=prompt,
        )
        await authenticator.authenticate()

    assert shown == [("https://microsoft.com/devicelogin", "CODE-1")]
