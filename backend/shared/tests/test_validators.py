import pytest
from pydantic_settings import BaseSettings

from shared.validators import StringListEnvSettingsSource, parse_string_list


class TestParseStringList:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ('["http://a.com","http://b.com"]', ["http://a.com", "http://b.com"]),
            ("http://a.com,http://b.com", ["http://a.com", "http://b.com"]),
            ("  http://a.com , http://b.com  ", ["http://a.com", "http://b.com"]),
            ("http://a.com,,http://b.com,", ["http://a.com", "http://b.com"]),
            ("*", ["*"]),
        ],
    )
    def test_string_forms(self, raw, expected):
        assert parse_string_list(raw) == expected

    def test_list_passes_through(self):
        origins = ["http://a.com"]
        assert parse_string_list(origins) is origins

    @pytest.mark.parametrize("raw", ["", "   ", ",", ",,,", "[]"])
    def test_empty_values_rejected(self, raw):
        with pytest.raises(ValueError, match="must not be empty"):
            parse_string_list(raw)

    def test_empty_list_rejected(self):
        with pytest.raises(ValueError, match="must not be empty"):
            parse_string_list([])

    def test_malformed_json_rejected(self):
        with pytest.raises(ValueError, match="Invalid JSON array"):
            parse_string_list("[not valid json")

    def test_non_string_items_rejected(self):
        with pytest.raises(ValueError, match="must be an array of strings"):
            parse_string_list('["http://a.com", 123]')


class _OriginSettings(BaseSettings):
    model_config = {"env_prefix": "TEST_"}

    cors_origins: list[str] = ["*"]
    ports: list[int] = []


class TestStringListEnvSettingsSource:
    def test_string_list_field_stays_raw(self, monkeypatch):
        monkeypatch.setenv("TEST_CORS_ORIGINS", "http://a.com,http://b.com")
        source = StringListEnvSettingsSource(_OriginSettings)

        assert source()["cors_origins"] == "http://a.com,http://b.com"

    def test_other_list_fields_are_json_decoded(self, monkeypatch):
        monkeypatch.setenv("TEST_PORTS", "[80, 443]")
        source = StringListEnvSettingsSource(_OriginSettings)

        assert source()["ports"] == [80, 443]
