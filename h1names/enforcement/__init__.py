"""Fee enforcement module for application contracts."""

from .state import FeeModuleState, STORAGE_NAMESPACE
from .base import FeeEnforcement, application_fee

__all__ = [
    'FeeEnforcement',
    'FeeModuleState',
    'STORAGE_NAMESPACE',
    'application_fee',
]
