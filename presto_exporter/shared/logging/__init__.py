from .json import CustomJsonFormatter, Redactor, configure_logging

__all__ = ["CustomJsonFormatter", "Redactor", "configure_logging"]
