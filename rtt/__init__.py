"""rtt: check out package registries as they were when a package version was released."""

__version__ = "0.1.0"
