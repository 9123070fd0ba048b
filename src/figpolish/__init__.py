"""figpolish top-level API.

External users can simply ``from figpolish import beautify``.
"""

from .api import InvalidTargetError, beautify
from .config import ConfigRecord, resolve
from .utils.logging import configure_logging

__version__ = "0.1.0"

__all__ = ["beautify", "InvalidTargetError", "ConfigRecord", "resolve", "configure_logging"]
