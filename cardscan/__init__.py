"""Card Scanner - turn noisy OCR frames into catalog identities and collection ledger events."""

__version__ = "1.0.0"
__author__ = "Card Scanner Team"
__description__ = "OCR normalization, catalog candidate ranking, scan gating and an event-sourced collection ledger"

from .core.types import (
    CatalogEntry,
    IdentificationResult,
    NormalizedReading,
    OcrReading,
    ScanCandidate,
)
from .ledger import EventLog, compute_collection_value, materialize
from .match import HttpCatalogIndex, InMemoryCatalogIndex
from .ocr import confidence, normalize_collector_number, normalize_name, normalize_set_code
from .scan import ScanGate, ScanSession, ScanTray, identify, identify_async
from .utils.config import settings

# Core functionality imports
from .utils.log import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__author__",
    "__description__",
    # Core components
    "configure_logging",
    "get_logger",
    "settings",
    "CatalogEntry",
    "ScanCandidate",
    "OcrReading",
    "NormalizedReading",
    "IdentificationResult",
    "normalize_name",
    "normalize_collector_number",
    "normalize_set_code",
    "confidence",
    "InMemoryCatalogIndex",
    "HttpCatalogIndex",
    "ScanGate",
    "ScanSession",
    "ScanTray",
    "identify",
    "identify_async",
    "EventLog",
    "materialize",
    "compute_collection_value",
]
