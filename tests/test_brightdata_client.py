from __future__ import annotations

import json
from typing import Any, Dict, List

import pytest
import requests

import services.brightdata_client as bd
from services.brightdata_client import BrightDataClient, ProviderConfig
from services.errors import ConfigError, ProviderError, UpstreamError


class _FakeResponse:
    def __init__(self, status_code: int, payload: Any = None, text: str = "") -> None:
        self.status_code = status_code
        self._payload = payload
        self.text = text or (json.dumps(payload) if payload is not None else "")

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


def _capture_post(monkeypatch, response: _FakeResponse) -> List[Dict[str, Any]]:
    calls: List[Dict[str, Any]] = []

    def _fake_post(url, json=None, headers=None, timeout=None):
        calls.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        return response

    monkeypatch.setattr(bd.requests, "post", _fake_post)
    return calls


def _config(**overrides) -> ProviderConfig:
    values = {"api_key": "secret-key", "collector_id": "gd_l1viktl72bvl7bjuj0"}
    values.update(overrides)
    return ProviderConfig(**values)


def test_dataset_id_in_path_by_default(monkeypatch):
    calls = _capture_post(monkeypatch, _FakeResponse(200, {"name": "Jane Doe"}))
    client = BrightDataClient(_config())

    payload = client.call("https://linkedin.com/in/jane")

    assert payload == {"name": "Jane Doe"}
    assert len(calls) == 1
    assert calls[0]["url"] == "https://api.brightdata.com/datasets/v3/gd_l1viktl72bvl7bjuj0/trigger"
    assert calls[0]["json"] == {"url": "https://linkedin.com/in/jane", "format": "json"}
    assert calls[0]["headers"]["Authorization"] == "Bearer secret-key"
    assert calls[0]["timeout"] is None


def test_generic_trigger_url_puts_dataset_id_in_body(monkeypatch):
    calls = _capture_post(monkeypatch, _FakeResponse(200, [{"name": "Jane"}]))
    client = BrightDataClient(_config(trigger_url="https://api.brightdata.com/datasets/v3/trigger", auth_scheme="Token"))

    payload = client.call("https://linkedin.com/in/jane")

    assert payload == [{"name": "Jane"}]
    assert calls[0]["url"] == "https://api.brightdata.com/datasets/v3/trigger"
    assert calls[0]["json"]["dataset_id"] == "gd_l1viktl72bvl7bjuj0"
    assert calls[0]["headers"]["Authorization"] == "Token secret-key"


def test_trigger_url_containing_id_keeps_body_minimal(monkeypatch):
    url = "https://api.brightdata.com/datasets/v3/gd_l1viktl72bvl7bjuj0/trigger?include_errors=true"
    calls = _capture_post(monkeypatch, _FakeResponse(200, {}))
    BrightDataClient(_config(trigger_url=url)).call("https://linkedin.com/in/jane")
    assert calls[0]["url"] == url
    assert "dataset_id" not in calls[0]["json"]


def test_provider_options_cannot_override_reserved_keys(monkeypatch):
    calls = _capture_post(monkeypatch, _FakeResponse(200, {}))
    BrightDataClient(_config()).call(
        "https://linkedin.com/in/jane",
        {"url": "https://evil.example", "format": "csv", "notify": "https://hooks.example/x"},
    )
    body = calls[0]["json"]
    assert body["url"] == "https://linkedin.com/in/jane"
    assert body["format"] == "json"
    assert body["notify"] == "https://hooks.example/x"


@pytest.mark.parametrize(
    "overrides, fragment",
    [
        ({"api_key": None}, "BRIGHTDATA_API_KEY"),
        ({"api_key": "  "}, "BRIGHTDATA_API_KEY"),
        ({"api_key": "your-api-key"}, "BRIGHTDATA_API_KEY"),
        ({"collector_id": None}, "BRIGHTDATA_COLLECTOR_ID"),
        ({"collector_id": "linkedin-profile"}, "BRIGHTDATA_COLLECTOR_ID"),
    ],
)
def test_missing_or_placeholder_config_raises_before_any_request(monkeypatch, overrides, fragment):
    calls = _capture_post(monkeypatch, _FakeResponse(200, {}))
    with pytest.raises(ConfigError) as excinfo:
        BrightDataClient(_config(**overrides)).call("https://linkedin.com/in/jane")
    assert fragment in str(excinfo.value)
    assert calls == []


def test_non_success_status_raises_upstream_error(monkeypatch):
    _capture_post(monkeypatch, _FakeResponse(401, text="invalid token"))
    with pytest.raises(UpstreamError) as excinfo:
        BrightDataClient(_config()).call("https://linkedin.com/in/jane")
    err = excinfo.value
    assert err.upstream_status == 401
    assert err.body == "invalid token"
    assert str(err) == "Bright Data API error: 401 - invalid token"
    assert err.status_code == 502


def test_network_error_is_generic_provider_error(monkeypatch):
    def _boom(*args, **kwargs):
        raise requests.ConnectionError("connection refused")

    monkeypatch.setattr(bd.requests, "post", _boom)
    with pytest.raises(ProviderError) as excinfo:
        BrightDataClient(_config()).call("https://linkedin.com/in/jane")
    assert not isinstance(excinfo.value, UpstreamError)
    assert excinfo.value.status_code == 500


def test_invalid_json_body_is_provider_error(monkeypatch):
    _capture_post(monkeypatch, _FakeResponse(200, None, text="<html>oops</html>"))
    with pytest.raises(ProviderError):
        BrightDataClient(_config()).call("https://linkedin.com/in/jane")


def test_config_from_settings(monkeypatch):
    from config.settings import get_settings

    monkeypatch.setenv("BRIGHTDATA_API_KEY", "k")
    monkeypatch.setenv("BRIGHTDATA_COLLECTOR_ID", "gd_123")
    monkeypatch.setenv("BRIGHTDATA_AUTH_SCHEME", " Token ")
    monkeypatch.setenv("PROVIDER_TIMEOUT_SECONDS", "12.5")
    monkeypatch.delenv("BRIGHTDATA_TRIGGER_URL", raising=False)
    get_settings.cache_clear()
    try:
        config = ProviderConfig.from_settings(get_settings())
    finally:
        get_settings.cache_clear()
    assert config.api_key == "k"
    assert config.collector_id == "gd_123"
    assert config.auth_scheme == "Token"
    assert config.timeout_seconds == 12.5
    assert config.trigger_url is None
