from .tenancy import Team, Store
from .auth import User, SessionToken
from .inventory import Product, History
from .carts import Cart, CartItem
from .documents import Order, DocumentSequence
from .reporting import Report, ReportOrder, Graphic, GraphicHistory

__all__ = [
    'Team', 'Store',
    'User', 'SessionToken',
    'Product', 'History',
    'Cart', 'CartItem',
    'Order', 'DocumentSequence',
    'Report', 'ReportOrder', 'Graphic', 'GraphicHistory',
]
