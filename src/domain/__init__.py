"""Domain package exposing mix settings models, persistence, and export."""
from .export_service import DirectoryFileOffer, FileOffer, MixExportResult, MixExportService
from .models import MixSettings, MixSpec, SourceSelection
from .persistence import MixSettingsFileAdapter, MixSettingsSerializer

__all__ = [
    "DirectoryFileOffer",
    "FileOffer",
    "MixExportResult",
    "MixExportService",
    "MixSettings",
    "MixSettingsFileAdapter",
    "MixSettingsSerializer",
    "MixSpec",
    "SourceSelection",
]
