"""Save orchestration: subsystem registry, envelopes, backups, import/export."""

from idlevault.saves.backups import BackupRotator
from idlevault.saves.base import BaseSaveProvider, CallbackSaveProvider, SaveHandler
from idlevault.saves.envelope import EnvelopeCodec, SaveEnvelope, UnwrapResult, canonical_json, compute_checksum
from idlevault.saves.loader import SaveLoader
from idlevault.saves.migrations import MigrationRegistry
from idlevault.saves.registry import SubsystemRegistry
from idlevault.saves.results import BackupInfo, ImportResult, LoadResult, SaveErrorKind, SaveState
from idlevault.saves.sanitize import sanitize_json
from idlevault.saves.service import SaveService
from idlevault.saves.transfer import decode_import, encode_export

__all__ = [
    "BackupInfo",
    "BackupRotator",
    "BaseSaveProvider",
    "CallbackSaveProvider",
    "EnvelopeCodec",
    "ImportResult",
    "LoadResult",
    "MigrationRegistry",
    "SaveEnvelope",
    "SaveErrorKind",
    "SaveHandler",
    "SaveLoader",
    "SaveService",
    "SaveState",
    "SubsystemRegistry",
    "UnwrapResult",
    "canonical_json",
    "compute_checksum",
    "decode_import",
    "encode_export",
    "sanitize_json",
]
