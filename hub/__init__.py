"""Display hub - keeps display clients in sync with the plugin and style registries."""

__version__ = "0.1.0"
