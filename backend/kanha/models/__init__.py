from kanha.models.user import User
from kanha.models.item import Item
from kanha.models.invoice import Invoice
from kanha.models.cart import Cart, CartItem

__all__ = ["User", "Item", "Invoice", "Cart", "CartItem"]
