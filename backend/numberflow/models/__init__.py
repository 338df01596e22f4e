from .auth import User, SessionToken
from .numbers import NumberRecord
from .sales import SaleRecord, PortOutRecord
from .purchases import PurchaseRecord, DealerPurchaseRecord
from .communications import Reminder, Activity

__all__ = [
    'User', 'SessionToken',
    'NumberRecord',
    'SaleRecord', 'PortOutRecord',
    'PurchaseRecord', 'DealerPurchaseRecord',
    'Reminder', 'Activity',
]
