"""Tests for plugin and style models."""

import pytest
from pydantic import ValidationError

from helpers import meta
from hub.models.plugin import ConfigValue, PluginMeta, Style, is_safe_name


class TestIsSafeName:

    @pytest.mark.parametrize("name", ["foo", "clock-widget", "a.b", "Ünïcode"])
    def test_accepts_single_component(self, name):
        assert is_safe_name(name)

    @pytest.mark.parametrize("name", ["", ".", "..", "a/b", "..\\x", "a\x00b", None, 3])
    def test_rejects_paths(self, name):
        assert not is_safe_name(name)


class TestPluginMeta:
    """Tests for PluginMeta defaults, overrides and canonicalization."""

    def test_unsafe_name_is_schema_error(self):
        with pytest.raises(ValidationError):
            PluginMeta.model_validate(meta(name="../etc"))

    def test_missing_version_is_schema_error(self):
        data = meta()
        del data["version"]
        with pytest.raises(ValidationError):
            PluginMeta.model_validate(data)

    def test_config_default_is_required(self):
        with pytest.raises(ValidationError):
            PluginMeta.model_validate(meta(configs=[{"name": "color", "type": "text"}]))

    def test_with_defaults_prepends_enabled(self):
        parsed = PluginMeta.model_validate(meta(configs=[
            {"name": "color", "type": "text", "default": "red"},
            {"name": "size", "type": "number", "default": 3, "value": 5},
        ])).with_defaults()

        configs = [c.model_dump() for c in parsed.configs]
        assert configs[0] == {"name": "enabled", "type": "checkbox", "default": False, "value": False}
        assert configs[1]["value"] == "red"
        assert configs[2]["value"] == 5

    def test_duplicate_config_names_are_schema_error(self):
        with pytest.raises(ValidationError):
            PluginMeta.model_validate(meta(configs=[
                {"name": "color", "type": "text", "default": "red"},
                {"name": "color", "type": "number", "default": 1},
            ]))

    def test_with_defaults_discards_caller_enabled(self):
        parsed = PluginMeta.model_validate(meta(configs=[
            {"name": "enabled", "type": "checkbox", "default": True},
        ])).with_defaults()
        assert [(c.name, c.default) for c in parsed.configs] == [("enabled", False)]

    def test_with_defaults_without_configs(self):
        parsed = PluginMeta.model_validate(meta()).with_defaults()
        assert [c.name for c in parsed.configs] == ["enabled"]

    def test_apply_only_touches_matching_configs(self):
        parsed = PluginMeta.model_validate(meta(configs=[
            {"name": "color", "type": "text", "default": "red"},
        ])).with_defaults()

        updated = parsed.apply([
            ConfigValue(name="enabled", value=True),
            ConfigValue(name="missing", value=1),
        ])

        values = {c.name: c.value for c in updated.configs}
        assert values == {"enabled": True, "color": "red"}
        # the original is left untouched
        assert parsed.configs[0].value is False

    def test_canonical_rewrites_script(self):
        parsed = PluginMeta.model_validate(meta(script={"url": "http://example.com/a.js"}))
        wire = parsed.canonical().to_wire()
        assert wire["script"] == {"url": "/script/foo.js", "inline": None}
        assert parsed.script.url == "http://example.com/a.js"


class TestStyle:

    def test_empty_style_serializes_to_empty_object(self):
        assert Style().to_wire() == {}

    def test_served_style(self):
        assert Style.served().to_wire() == {"url": "/custom/style.css"}
