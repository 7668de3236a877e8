"""Vault host adapter - scans a notes directory and follows its changes."""

from vaultseek.vault.scanner import NoteMetadata, VaultScanner, parse_note
from vaultseek.vault.watcher import VaultWatcher, build_events

__all__ = [
    "VaultScanner",
    "VaultWatcher",
    "NoteMetadata",
    "parse_note",
    "build_events",
]
