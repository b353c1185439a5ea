"""Order status push notifications for the Sparkd marketplace."""

__version__ = "1.0.0"
