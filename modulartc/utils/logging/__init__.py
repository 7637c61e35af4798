from .logger import get_logger, set_log_level
from .warnings import catch_warnings, warn

__all__ = ["catch_warnings", "get_logger", "set_log_level", "warn"]
