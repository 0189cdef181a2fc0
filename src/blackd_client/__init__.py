"""Command-line client that formats source files through a blackd daemon."""

__version__ = "0.1.0"

from .config import AppConfig, load_config
from .core import FormatService
from .models import BatchFormatResult, FormatConfiguration, FormatOutcome, OutcomeStatus
from .protocol import translate
from .transport import DaemonClient

__all__ = [
    "__version__",
    "AppConfig",
    "load_config",
    "BatchFormatResult",
    "DaemonClient",
    "FormatConfiguration",
    "FormatOutcome",
    "FormatService",
    "OutcomeStatus",
    "translate",
]
