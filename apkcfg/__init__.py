"""apkcfg - build descriptor resolver for Android packaging."""

__version__ = "0.1.0"
