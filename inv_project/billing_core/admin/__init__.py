from .actions import (mark_invoices_paid, move_companies_to_junk,
                      restore_companies)
from .customer import CompanyAdmin
from .inlines import InvoiceLineItemInline
from .invoice import CompanyPaymentAdmin, InvoiceAdmin
from .item import InventoryItemAdmin
from .mixins import TenantAdminMixin
from .profile import BankDetailsAdmin, SellerInfoAdmin
from .ReadOnly import ReadOnlyAdmin
