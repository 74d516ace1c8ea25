from .company import Company
from .invoice import Invoice, InvoiceLineItem
from .item import InventoryItem
from .payment import CompanyPayment
from .profile import BankDetails, SellerInfo
