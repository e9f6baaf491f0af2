"""Plugin and style models - describe what is persisted and broadcast."""

from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator

from hub.constants import (
    ENABLED_CONFIG_NAME,
    ENABLED_CONFIG_TYPE,
    SCRIPT_URL_TEMPLATE,
    STYLE_URL,
)


def is_safe_name(name: Any) -> bool:
    """Check that a plugin name can be used as a single path component."""
    if not isinstance(name, str) or not name:
        return False
    if name in (".", ".."):
        return False
    return not any(c in name for c in ("/", "\\", "\x00"))


class Config(BaseModel):
    """One named, typed, defaulted plugin setting."""

    name: str
    type: str = Field(..., description="Widget kind, e.g. checkbox | text | number")
    default: Any = Field(...)
    value: Optional[Any] = None


class ConfigValue(BaseModel):
    """Override applied by a configure request."""

    name: str
    value: Any = Field(...)


class Script(BaseModel):
    url: Optional[str] = None
    inline: Optional[str] = None


class PluginMeta(BaseModel):
    """Plugin metadata as stored in ``plugins/<name>/meta.json``."""

    name: str
    version: str
    url: Optional[str] = None
    description: Optional[str] = None
    configs: Optional[List[Config]] = None
    script: Script

    @field_validator("name")
    @classmethod
    def name_is_path_component(cls, v: str) -> str:
        if not is_safe_name(v):
            raise ValueError("name must be a single path component")
        return v

    @field_validator("configs")
    @classmethod
    def config_names_are_unique(cls, v: Optional[List[Config]]) -> Optional[List[Config]]:
        names = [c.name for c in v or []]
        if len(names) != len(set(names)):
            raise ValueError("config names must be unique")
        return v

    def with_defaults(self) -> "PluginMeta":
        """Prepend the synthetic ``enabled`` config and fill missing values.

        A caller-supplied ``enabled`` entry is discarded; the registry owns it.
        """
        configs = [
            Config(name=ENABLED_CONFIG_NAME, type=ENABLED_CONFIG_TYPE, default=False)
        ]
        configs.extend(
            c.model_copy() for c in self.configs or [] if c.name != ENABLED_CONFIG_NAME
        )
        for config in configs:
            if config.value is None:
                config.value = config.default
        return self.model_copy(update={"configs": configs})

    def apply(self, overrides: List[ConfigValue]) -> "PluginMeta":
        """Return a copy with matching config values replaced.

        Unmatched overrides are ignored; configs not mentioned keep their value.
        """
        values = {cv.name: cv.value for cv in overrides}
        configs = []
        for config in self.configs or []:
            config = config.model_copy()
            if config.name in values:
                value = values[config.name]
                config.value = config.default if value is None else value
            configs.append(config)
        return self.model_copy(update={"configs": configs})

    def canonical(self) -> "PluginMeta":
        """Copy with the script pointing at its served path."""
        return self.model_copy(
            update={"script": Script(url=SCRIPT_URL_TEMPLATE.format(self.name))}
        )

    def to_wire(self) -> dict:
        return self.model_dump(mode="json")


class Style(BaseModel):
    """Custom stylesheet reference: either a url or inline CSS."""

    url: Optional[str] = None
    inline: Optional[str] = None

    @classmethod
    def served(cls) -> "Style":
        return cls(url=STYLE_URL)

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)
