from .config import PolicyConfig
from .origin_policy import OriginPolicy

__all__ = ["PolicyConfig", "OriginPolicy"]
