from .db_models import (
    Base,
    User,
    UserSettings,
    SubAccount,
    Trade,
    users_table,
    user_settings_table,
    sub_accounts_table,
    trades_table,
)
from .user import UserRead, UserSettingsRead, SettingsDefaults, DEFAULT_CURRENCY, DEFAULT_THEME
from .sub_account import SubAccountRead
from .trade import (
    TradeDirection,
    TradeStatus,
    TradeRead,
    TradeCreate,
    TradeClose,
    TradeDetailsUpdate,
)

__all__ = [
    'Base',
    'User',
    'UserSettings',
    'SubAccount',
    'Trade',
    'users_table',
    'user_settings_table',
    'sub_accounts_table',
    'trades_table',
    'UserRead',
    'UserSettingsRead',
    'SettingsDefaults',
    'DEFAULT_CURRENCY',
    'DEFAULT_THEME',
    'SubAccountRead',
    'TradeDirection',
    'TradeStatus',
    'TradeRead',
    'TradeCreate',
    'TradeClose',
    'TradeDetailsUpdate',
]
