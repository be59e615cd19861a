"""Domain exceptions for kiosk settings."""


class ConfigurationServiceError(Exception):
    """Base exception for settings service errors."""
    pass


class InvalidSettingError(ConfigurationServiceError):
    """Unknown setting key or a value that fails validation."""
    pass
