"""Financial advisor tool server: catalog, handlers and wire protocol."""

__version__ = "0.1.0"
