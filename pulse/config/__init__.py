from .main import Config

__all__ = [
    "Config",
]
