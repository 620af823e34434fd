#import wszystkich modeli zeby SQLAlchemy je zarejestrowal w base metadata

from cart_service.data.models.customer import CustomerModel
from cart_service.data.models.cart import CartModel
from cart_service.data.models.order import OrderModel

__all__ = ["CustomerModel", "CartModel", "OrderModel"]
