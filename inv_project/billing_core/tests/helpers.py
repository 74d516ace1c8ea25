from decimal import Decimal

from django.contrib.auth import get_user_model

from ..services import customers
from ..services.cart import InvoiceCart


def make_user(username="alice"):
    return get_user_model().objects.create_user(username=username, password="pw")


def make_company(owner, name="Sharma Constructions Pvt Ltd", pending="0"):
    return customers.create_company(owner, name=name, state="Maharashtra",
                                    state_code="27", pending_amount=Decimal(pending))


def make_cart(company, *lines):
    """Cart for company; lines are (name, rate, quantity[, discount])."""
    cart = InvoiceCart.from_session(None)
    cart.set_company(company)
    for name, rate, quantity, *rest in lines:
        cart.add_item(name=name, rate=Decimal(rate), quantity=Decimal(quantity),
                      discount=Decimal(rest[0]) if rest else Decimal("0"))
    return cart
