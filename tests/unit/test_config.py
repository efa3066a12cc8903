from __future__ import annotations

import pytest

from syncwright.config import LoginSettings, load_credential


def test_no_allow_list_means_every_host_is_interactive() -> None:
    settings = LoginSettings()
    assert settings.requires_interactive_auth("https://anything.example.org/main.aspx")


def test_allow_list_matches_host_suffix() -> None:
    settings = LoginSettings(interactive_auth_domains=("dynamics.com", " .crm4.dynamics.com "))

    assert settings.requires_interactive_auth("https://contoso.crm4.dynamics.com/")
    assert settings.requires_interactive_auth("https://contoso.crm.DYNAMICS.com/")
    assert not settings.requires_interactive_auth("https://crm.contoso.local/")
    assert settings.interactive_auth_domains == ("dynamics.com", "crm4.dynamics.com")


def test_empty_allow_list_means_nothing_is_interactive() -> None:
    settings = LoginSettings(interactive_auth_domains=())
    assert not settings.requires_interactive_auth("https://contoso.crm.dynamics.com/")


def test_from_env_reads_prefixed_variables() -> None:
    settings = LoginSettings.from_env(
        {
            "SYNCWRIGHT_INTERACTIVE_AUTH_DOMAINS": "dynamics.com, microsoftonline.com",
            "SYNCWRIGHT_OTC_RETRY_ATTEMPTS": "5",
            "SYNCWRIGHT_PROBE_TIMEOUT_S": "3.5",
            "SYNCWRIGHT_THINK_TIME_S": "0",
        }
    )

    assert settings.interactive_auth_domains == ("dynamics.com", "microsoftonline.com")
    assert settings.otc_retry_attempts == 5
    assert settings.probe_timeout_s == 3.5
    assert settings.think_time_s == 0


def test_from_env_reads_page_load_verify_and_redirect_timings() -> None:
    settings = LoginSettings.from_env(
        {
            "SYNCWRIGHT_PAGE_LOAD_TIMEOUT_S": "45",
            "SYNCWRIGHT_OTC_VERIFY_TIMEOUT_S": "2.5",
            "SYNCWRIGHT_REDIRECT_WAIT_S": "0",
        }
    )

    assert settings.page_load_timeout_s == 45
    assert settings.otc_verify_timeout_s == 2.5
    assert settings.redirect_wait_s == 0


def test_from_env_defaults_when_unset() -> None:
    assert LoginSettings.from_env({}) == LoginSettings()


@pytest.mark.parametrize(
    "kwargs",
    [
        {"otc_retry_attempts": 0},
        {"probe_timeout_s": 0},
        {"poll_interval_s": -0.1},
        {"think_time_s": -1},
    ],
)
def test_invalid_settings_rejected(kwargs) -> None:
    with pytest.raises(ValueError):
        LoginSettings(**kwargs)


def test_load_credential_from_env() -> None:
    cred = load_credential(
        {
            "SYNCWRIGHT_USERNAME": "admin@contoso.com",
            "SYNCWRIGHT_PASSWORD": "hunter2",
            "SYNCWRIGHT_MFA_SECRET_KEY": "JBSWY3DPEHPK3PXP",
        }
    )

    assert cred is not None
    assert cred.username.get_secret_value() == "admin@contoso.com"
    assert cred.password.get_secret_value() == "hunter2"
    assert cred.has_mfa_secret


def test_load_credential_without_username_is_none() -> None:
    assert load_credential({"SYNCWRIGHT_PASSWORD": "hunter2"}) is None


def test_load_credential_without_mfa_secret() -> None:
    cred = load_credential({"SYNCWRIGHT_USERNAME": "u", "SYNCWRIGHT_PASSWORD": "p"})
    assert cred is not None
    assert cred.mfa_secret is None
