from django.urls import path

from . import views

app_name = "billing_core"

urlpatterns = [
    path("dashboard/", views.dashboard, name="dashboard"),

    # invoices
    path("invoices/", views.invoice_list, name="invoice-list"),
    path("invoices/search/", views.invoice_search, name="invoice-search"),
    path("invoices/save/", views.invoice_save, name="invoice-save"),
    path("invoices/<int:invoice_id>/", views.invoice_detail, name="invoice-detail"),
    path("invoices/<int:invoice_id>/edit/", views.invoice_begin_edit, name="invoice-edit"),
    path("invoices/<int:invoice_id>/delete/", views.invoice_delete, name="invoice-delete"),
    path("invoices/<int:invoice_id>/paid/", views.invoice_mark_paid, name="invoice-paid"),
    path("invoices/<int:invoice_id>/pdf/", views.invoice_pdf_download, name="invoice-pdf"),

    # cart
    path("cart/", views.cart_detail, name="cart"),
    path("cart/company/", views.cart_set_company, name="cart-company"),
    path("cart/items/", views.cart_add_item, name="cart-add"),
    path("cart/items/<str:line_id>/", views.cart_edit_line, name="cart-edit"),
    path("cart/items/<str:line_id>/remove/", views.cart_remove_line, name="cart-remove"),
    path("cart/reset/", views.cart_reset, name="cart-reset"),

    # customers and payments
    path("companies/", views.company_list, name="company-list"),
    path("companies/junk/", views.company_junk_list, name="company-junk"),
    path("companies/<int:company_id>/", views.company_update, name="company-update"),
    path("companies/<int:company_id>/delete/", views.company_soft_delete, name="company-delete"),
    path("companies/<int:company_id>/restore/", views.company_restore, name="company-restore"),
    path("companies/<int:company_id>/purge/", views.company_purge, name="company-purge"),
    path("companies/<int:company_id>/report/", views.company_report, name="company-report"),
    path("companies/<int:company_id>/payments/", views.company_payments, name="company-payments"),
    path("payments/<int:payment_id>/delete/", views.payment_delete, name="payment-delete"),

    # inventory and profile
    path("items/", views.item_list, name="item-list"),
    path("items/<int:item_id>/", views.item_update, name="item-update"),
    path("items/<int:item_id>/delete/", views.item_delete, name="item-delete"),
    path("profile/seller/", views.seller_info_save, name="seller-info"),
    path("profile/bank/", views.bank_details_save, name="bank-details"),
]
