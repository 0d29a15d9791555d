from . import auth
from . import suppliers

__all__ = [
    "auth",
    "suppliers",
]
