from .auth_service import AuthService
from .backup_service import BackupService

__all__ = [
    'AuthService',
    'BackupService',
]
