"""
Log codes for configuration-related operations.
"""

CONFIG = "config"

# Configuration file
CONFIG_FILE = f"{CONFIG}.file"
CONFIG_FILE_LOADED = f"{CONFIG_FILE}.loaded"
CONFIG_FILE_MISSING_SECTION = f"{CONFIG_FILE}.missing_section"
CONFIG_FILE_UNREADABLE = f"{CONFIG_FILE}.unreadable"

# Environment
CONFIG_ENV = f"{CONFIG}.env"
CONFIG_ENV_RESOLVED = f"{CONFIG_ENV}.resolved"
CONFIG_ENV_INVALID = f"{CONFIG_ENV}.invalid"
