"""Building blocks for assisted code review: comments, events, data scanners, an example analyzer and configuration."""

__version__ = "0.1.0"

__all__ = ["analysis", "config", "data", "dummy", "event", "poster", "sdk", "types"]