from .user_repository import UserRepository
from .sub_account_repository import SubAccountRepository
from .trade_repository import TradeRepository, DEFAULT_PAGE_SIZE

__all__ = [
    'UserRepository',
    'SubAccountRepository',
    'TradeRepository',
    'DEFAULT_PAGE_SIZE',
]
