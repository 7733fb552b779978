"""Tests for store connection settings."""

import pytest

from video_relink.config import PRODUCTION_API_HOST, STAGING_API_HOST, StoreSettings, build_settings
from video_relink.exceptions import ConfigurationError


def test_hosts_follow_prod_flag() -> None:
    staging = StoreSettings(project_id="abc", token="t")
    prod = StoreSettings(project_id="abc", token="t", prod=True)

    assert staging.api_host == STAGING_API_HOST
    assert staging.project_host == "https://abc.api.sanity.work"
    assert prod.api_host == PRODUCTION_API_HOST
    assert prod.project_host == "https://abc.api.sanity.io"
    assert staging.dataset == "production"


def test_api_version_defaults_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SANITY_API_VERSION", "2025-02-19")
    assert StoreSettings(project_id="abc", token="t").api_version == "v2025-02-19"

    monkeypatch.delenv("SANITY_API_VERSION")
    assert StoreSettings(project_id="abc", token="t").api_version == "vX"


def test_build_settings_rejects_empty_credentials() -> None:
    with pytest.raises(ConfigurationError):
        build_settings(project_id="", token="t")
    with pytest.raises(ConfigurationError):
        build_settings(project_id="abc", token="")
