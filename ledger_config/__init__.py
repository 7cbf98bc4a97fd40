"""
Run configuration for the batch ledger.

Public API:
    LedgerSettings   -- frozen settings dataclass.
    load_settings    -- YAML file + ``LEDGER_*`` environment + overrides.
    SettingsError    -- malformed settings file or value.
"""

from ledger_config.loader import SettingsError, load_settings
from ledger_config.schema import LedgerSettings

__all__ = ["LedgerSettings", "SettingsError", "load_settings"]
