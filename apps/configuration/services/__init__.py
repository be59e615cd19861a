"""
Kiosk settings services.

Runtime settings (coffee price, admin email, bank details) editable from the
admin panel, plus the pricing provider used by the ledger.
"""

from .settings_management import (
    get_setting,
    get_all_settings,
    get_unit_price,
    get_admin_email,
    get_bank_details,
    update_setting,
    update_settings,
    clean_setting_value,
    SettingsPricingProvider,
)
from .exceptions import (
    ConfigurationServiceError,
    InvalidSettingError,
)

__all__ = [
    'get_setting',
    'get_all_settings',
    'get_unit_price',
    'get_admin_email',
    'get_bank_details',
    'update_setting',
    'update_settings',
    'clean_setting_value',
    'SettingsPricingProvider',
    'ConfigurationServiceError',
    'InvalidSettingError',
]
