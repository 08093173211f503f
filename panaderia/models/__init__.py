"""Models package - exports all SQLAlchemy models."""
from panaderia.models.category import Category
from panaderia.models.product import Product
from panaderia.models.raw_material import RawMaterial
from panaderia.models.sale import Sale, SaleStatus, SaleKind
from panaderia.models.sale_line import SaleLine
from panaderia.models.sale_payment import SalePayment
from panaderia.models.order import Order, OrderStatus
from panaderia.models.order_line import OrderLine
from panaderia.models.order_deposit import OrderDeposit
from panaderia.models.system_setting import SystemSetting
from panaderia.models.waste import Waste

__all__ = [
    'Category', 'Product', 'RawMaterial',
    'Sale', 'SaleStatus', 'SaleKind', 'SaleLine', 'SalePayment',
    'Order', 'OrderStatus', 'OrderLine', 'OrderDeposit',
    'SystemSetting', 'Waste',
]
