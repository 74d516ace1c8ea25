from django.utils.deprecation import MiddlewareMixin

from .services.cart import SESSION_KEY, InvoiceCart


class InvoiceCartMiddleware(MiddlewareMixin):
    # Run on every request and
    # attach the invoice wizard state (request.cart) from the session
    def process_request(self, request):
        if request.user.is_authenticated:  # Check authentication
            request.cart = InvoiceCart.from_session(request.session.get(SESSION_KEY))
        else:
            # Unauthenticated users have no wizard
            request.cart = None

    # Write the cart back only when a view marked it as changed
    def process_response(self, request, response):
        cart = getattr(request, "cart", None)
        if cart is not None and getattr(request, "cart_changed", False):
            request.session[SESSION_KEY] = cart.to_session()
        return response
