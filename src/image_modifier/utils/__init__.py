from .logger import FailureLevel, configure_logging, log_railway_function


__all__ = ["FailureLevel", "configure_logging", "log_railway_function"]
