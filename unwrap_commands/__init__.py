"""Run configurable commands when players unwrap items."""

__version__ = "1.0.0"
