"""Default settings for idlevault.

Users can override these in their project's settings.py file.

Example:
    # In your project's settings.py:
    from idlevault.conf import global_settings

    # Override framework defaults
    STORAGE_KEY = "mygame_save"
    AUTOSAVE_INTERVAL = 60.0
    NUMBER_NOTATION = "scientific"

    # Register additional save providers
    INSTALLED_SAVES = [
        *global_settings.INSTALLED_SAVES,
        "mygame.research.ResearchSaveProvider",
    ]
"""

# Save settings
STORAGE_KEY = "idlevault_save"
"""Storage key of the primary save. Backups use "<STORAGE_KEY>_backup_<slot>"."""

SAVE_VERSION = 1
"""Save format version written by this build. Bump it when adding a migration."""

BACKUP_SLOTS = 3
"""Number of backup slots kept next to the primary save."""

# Autosave settings
AUTOSAVE_ENABLED = True
"""Whether AutoSaveSystem saves periodically."""

AUTOSAVE_INTERVAL = 30.0
"""Seconds between automatic saves."""

QUICK_SAVE_KEY = "F5"
"""Name of the arcade.key constant that triggers a quick save."""

QUICK_LOAD_KEY = "F9"
"""Name of the arcade.key constant that triggers a quick load."""

# Number display settings
NUMBER_NOTATION = "standard"
"""Default notation: "standard", "scientific", "engineering" or "letters"."""

NUMBER_PRECISION = 2
"""Decimal places shown for large numbers."""

# Storage settings
STORAGE_BACKEND = "file"
"""Storage backend: "file" (one file per key in SAVES_DIR) or "memory"."""

SAVES_DIR = "saves"
"""Directory for the file backend, relative to the working directory."""

STORAGE_QUOTA_BYTES = None
"""Capacity limit for the memory backend in bytes, or None for unlimited."""

# Cloud settings
CLOUD_MOCK_LATENCY = (0.0, 0.0)
"""(min, max) simulated latency in seconds for MockCloudSave calls."""

# Logging settings
LOG_LEVEL = "INFO"
"""Level passed to setup_logging() when none is given."""

# Installed save providers (like Django's INSTALLED_APPS)
INSTALLED_SAVES = [
    "idlevault.providers.DisplaySettingsProvider",
    "idlevault.providers.WalletSaveProvider",
]
"""Dotted paths of BaseSaveProvider subclasses registered at startup.

Users can add custom providers by extending this list in their settings.py:

Example:
    INSTALLED_SAVES = [
        *global_settings.INSTALLED_SAVES,
        "mygame.research.ResearchSaveProvider",
    ]
"""
