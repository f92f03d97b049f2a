from importlib.metadata import PackageNotFoundError, version

from epochlens.buffer import TextBuffer
from epochlens.diff import compute_text_edits
from epochlens.models import ConversionConfig, ConversionResult, EditOperation, Timezone
from epochlens.ranges import apply_text_edits
from epochlens.scanner import convert_timestamps
from epochlens.session import LiveSession

try:
    __version__ = version("epochlens")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"

__all__ = [
    "convert_timestamps",
    "compute_text_edits",
    "apply_text_edits",
    "ConversionConfig",
    "ConversionResult",
    "EditOperation",
    "Timezone",
    "TextBuffer",
    "LiveSession",
    "__version__",
]
