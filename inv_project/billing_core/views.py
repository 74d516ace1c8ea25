import functools
import json
import logging

from django.contrib.auth.decorators import login_required
from django.http import HttpResponse, JsonResponse
from django.views.decorators.http import require_GET, require_POST

from .exceptions import BillingError, ErrorKind, LedgerConflict, LedgerValidationError, RecordNotFound
from .models import Company, CompanyPayment, InventoryItem, Invoice
from .services import customers, inventory, ledger, profile
from .services.exports import company_workbook_bytes
from .services.layout import format_ist
from .services.money import compute_totals, to_decimal
from .services.pdf import invoice_pdf
from .services.reports import dashboard_summary

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.STORAGE_FAILURE: 503,
}


def billing_view(view):
    """login_required + BillingError -> {"ok": false, "kind", "error"}."""
    @functools.wraps(view)
    def wrapper(request, *args, **kwargs):
        try:
            return view(request, *args, **kwargs)
        except BillingError as exc:
            message = "; ".join(exc.messages) if isinstance(exc, LedgerValidationError) else str(exc)
            return JsonResponse(
                {"ok": False, "kind": exc.kind.value, "error": message},
                status=STATUS_BY_KIND[exc.kind],
            )
    return login_required(wrapper)


def _payload(request):
    # JSON body first, then form data
    if request.content_type == "application/json":
        try:
            return json.loads(request.body or b"{}")
        except ValueError as exc:
            raise LedgerValidationError("Malformed JSON body") from exc
    return request.POST.dict()


def _ok(**data):
    return JsonResponse({"ok": True, **data})


# ----------------------------
# Serializers
# ----------------------------
def _money(value):
    return str(value) if value is not None else None


def _company_json(company):
    return {
        "id": company.pk,
        "name": company.name,
        "gst_no": company.gst_no,
        "address": company.address,
        "state": company.state,
        "state_code": company.state_code,
        "phone": company.phone,
        "email": company.email,
        "pending_amount": _money(company.pending_amount),
        "last_transaction": company.last_transaction.isoformat() if company.last_transaction else None,
        "is_deleted": company.is_deleted,
        "days_until_purge": company.days_until_purge(),
    }


def _invoice_json(invoice, with_lines=False):
    data = {
        "id": invoice.pk,
        "invoice_number": invoice.invoice_number,
        "company_id": invoice.company_id,
        "company_name": invoice.company.name,
        "total_amount": _money(invoice.total_amount),
        "tax_amount": _money(invoice.tax_amount),
        "amount_received": _money(invoice.amount_received),
        "balance_due": _money(invoice.balance_due),
        "status": invoice.status,
        "due_date": invoice.due_date.isoformat() if invoice.due_date else None,
        "created_at": format_ist(invoice.created_at),
        "updated_at": format_ist(invoice.updated_at),
    }
    if with_lines:
        data["lines"] = [
            {
                "item_name": line.item_name,
                "item_hsn": line.item_hsn,
                "item_unit": line.item_unit,
                "quantity": _money(line.quantity),
                "unit_price": _money(line.unit_price),
                "discount": _money(line.discount),
                "line_total": _money(line.line_total),
                "boxes": line.boxes,
                "items_per_box": line.items_per_box,
            }
            for line in invoice.lines.all()
        ]
    return data


def _payment_json(payment):
    return {
        "id": payment.pk,
        "company_id": payment.company_id,
        "amount": _money(payment.amount),
        "previous_balance": _money(payment.previous_balance),
        "new_balance": _money(payment.new_balance),
        "note": payment.note,
        "created_at": format_ist(payment.created_at),
    }


def _item_json(item):
    return {
        "id": item.pk,
        "name": item.name,
        "hsn": item.hsn,
        "category": item.category,
        "rate": _money(item.rate),
        "stock": item.stock,
        "unit": item.unit,
        "gst_rate": _money(item.gst_rate),
    }


def _cart_json(cart):
    totals = compute_totals(line.as_tuple() for line in cart.lines)
    data = cart.to_session()
    data["totals"] = {
        "subtotal": _money(totals.subtotal),
        "round_off": _money(totals.round_off),
        "tax": _money(totals.tax),
        "grand_total": _money(totals.grand_total),
    }
    return data


def _result_json(result):
    return {
        "previous_balance": _money(result.previous_balance),
        "new_balance": _money(result.new_balance),
    }


# ----------------------------
# Invoices
# ----------------------------
@require_GET
@billing_view
def invoice_list(request):
    invoices = (
        Invoice.objects.for_owner(request.user)
        .select_related("company")
        .order_by("-created_at", "-id")
    )
    return _ok(invoices=[_invoice_json(inv) for inv in invoices])


@require_GET
@billing_view
def invoice_search(request):
    invoice = ledger.find_invoice(request.user, request.GET.get("q"))
    return _ok(invoice=_invoice_json(invoice, with_lines=True))


@require_GET
@billing_view
def invoice_detail(request, invoice_id):
    invoice = Invoice.objects.for_owner(request.user).filter(pk=invoice_id).first()
    if invoice is None:
        raise RecordNotFound(f"Invoice {invoice_id} not found")
    return _ok(invoice=_invoice_json(invoice, with_lines=True))


@require_POST
@billing_view
def invoice_save(request):
    """Create (or, in edit mode, update) the invoice held in the cart."""
    cart = request.cart
    if cart.editing_invoice_id:
        result = ledger.update_invoice(request.user, cart.editing_invoice_id, cart)
    else:
        result = ledger.create_invoice(request.user, cart)
    cart.reset()
    request.cart_changed = True
    return _ok(invoice=_invoice_json(result.invoice), **_result_json(result))


@require_POST
@billing_view
def invoice_begin_edit(request, invoice_id):
    invoice = Invoice.objects.for_owner(request.user).filter(pk=invoice_id).first()
    if invoice is None:
        raise RecordNotFound(f"Invoice {invoice_id} not found")
    if invoice.status == "paid":
        raise LedgerConflict(f"Invoice {invoice.invoice_number} is paid and cannot be edited")
    request.cart.begin_editing(invoice)
    request.cart_changed = True
    return _ok(cart=_cart_json(request.cart))


@require_POST
@billing_view
def invoice_delete(request, invoice_id):
    result = ledger.delete_invoice(request.user, invoice_id)
    return _ok(**_result_json(result))


@require_POST
@billing_view
def invoice_mark_paid(request, invoice_id):
    result = ledger.mark_invoice_paid(request.user, invoice_id)
    return _ok(invoice=_invoice_json(result.invoice))


@require_GET
@billing_view
def invoice_pdf_download(request, invoice_id):
    invoice = (
        Invoice.objects.for_owner(request.user)
        .select_related("company", "owner")
        .filter(pk=invoice_id)
        .first()
    )
    if invoice is None:
        raise RecordNotFound(f"Invoice {invoice_id} not found")
    previous = to_decimal(request.GET.get("previous_balance"))
    filename, content = invoice_pdf(invoice, previous_balance=previous)
    response = HttpResponse(content, content_type="application/pdf")
    response["Content-Disposition"] = f'attachment; filename="{filename}"'
    return response


# ----------------------------
# Cart (wizard)
# ----------------------------
@require_GET
@billing_view
def cart_detail(request):
    return _ok(cart=_cart_json(request.cart))


@require_POST
@billing_view
def cart_set_company(request):
    data = _payload(request)
    company = customers.get_company(request.user, data.get("company_id"))
    request.cart.set_company(company)
    request.cart_changed = True
    return _ok(cart=_cart_json(request.cart))


@require_POST
@billing_view
def cart_add_item(request):
    data = _payload(request)
    item = None
    if data.get("item_id"):
        item = InventoryItem.objects.for_owner(request.user).filter(pk=data["item_id"]).first()
        if item is None:
            raise RecordNotFound(f"Item {data['item_id']} not found")
    request.cart.add_item(
        item=item,
        name=data.get("name"),
        hsn=data.get("hsn"),
        unit=data.get("unit"),
        rate=data.get("rate"),
        quantity=data.get("quantity"),
        boxes=data.get("boxes"),
        items_per_box=data.get("items_per_box"),
        tax_rate=data.get("tax_rate"),
        discount=data.get("discount") or 0,
    )
    request.cart_changed = True
    return _ok(cart=_cart_json(request.cart))


@require_POST
@billing_view
def cart_edit_line(request, line_id):
    data = _payload(request)
    cart = request.cart
    cart.edit_line(
        line_id,
        boxes=data.get("boxes"),
        items_per_box=data.get("items_per_box"),
        rate=data.get("rate"),
        quantity=data.get("quantity"),
    )
    if data.get("discount") is not None:
        cart.set_discount(line_id, data["discount"])
    request.cart_changed = True
    return _ok(cart=_cart_json(cart))


@require_POST
@billing_view
def cart_remove_line(request, line_id):
    request.cart.remove_line(line_id)
    request.cart_changed = True
    return _ok(cart=_cart_json(request.cart))


@require_POST
@billing_view
def cart_reset(request):
    request.cart.reset()
    request.cart_changed = True
    return _ok(cart=_cart_json(request.cart))


# ----------------------------
# Customers and payments
# ----------------------------
@billing_view
def company_list(request):
    if request.method == "POST":
        company = customers.create_company(request.user, **_payload(request))
        return _ok(company=_company_json(company))
    companies = Company.objects.active(request.user).order_by("name")
    return _ok(companies=[_company_json(c) for c in companies])


@require_GET
@billing_view
def company_junk_list(request):
    companies = Company.objects.deleted(request.user).order_by("-deleted_at")
    return _ok(companies=[_company_json(c) for c in companies])


@require_POST
@billing_view
def company_update(request, company_id):
    data = _payload(request)
    pending = data.pop("pending_amount", None)
    company = customers.update_company(request.user, company_id, pending_amount=pending, **data)
    return _ok(company=_company_json(company))


@require_POST
@billing_view
def company_soft_delete(request, company_id):
    company = customers.soft_delete_company(request.user, company_id)
    return _ok(company=_company_json(company))


@require_POST
@billing_view
def company_restore(request, company_id):
    company = customers.restore_company(request.user, company_id)
    return _ok(company=_company_json(company))


@require_POST
@billing_view
def company_purge(request, company_id):
    customers.purge_company(request.user, company_id)
    return _ok()


@require_GET
@billing_view
def company_report(request, company_id):
    company = customers.get_company(request.user, company_id, include_deleted=True)
    filename, content = company_workbook_bytes(company)
    response = HttpResponse(
        content,
        content_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )
    response["Content-Disposition"] = f'attachment; filename="{filename}"'
    return response


@billing_view
def company_payments(request, company_id):
    if request.method == "POST":
        data = _payload(request)
        result = ledger.record_payment(
            request.user,
            company_id,
            data.get("amount"),
            note=data.get("note"),
            idempotency_key=data.get("idempotency_key") or request.headers.get("Idempotency-Key"),
        )
        return _ok(payment=_payment_json(result.payment), **_result_json(result))
    company = customers.get_company(request.user, company_id, include_deleted=True)
    payments = CompanyPayment.objects.for_owner(request.user).filter(company=company)
    return _ok(payments=[_payment_json(p) for p in payments])


@require_POST
@billing_view
def payment_delete(request, payment_id):
    result = ledger.delete_payment(request.user, payment_id)
    return _ok(**_result_json(result))


# ----------------------------
# Inventory, profile, dashboard
# ----------------------------
@billing_view
def item_list(request):
    if request.method == "POST":
        item = inventory.add_item(request.user, **_payload(request))
        return _ok(item=_item_json(item))
    items = InventoryItem.objects.for_owner(request.user).order_by("name")
    return _ok(items=[_item_json(i) for i in items])


@require_POST
@billing_view
def item_update(request, item_id):
    item = inventory.update_item(request.user, item_id, **_payload(request))
    return _ok(item=_item_json(item))


@require_POST
@billing_view
def item_delete(request, item_id):
    inventory.delete_item(request.user, item_id)
    return _ok()


@require_POST
@billing_view
def seller_info_save(request):
    info = profile.save_seller_info(request.user, **_payload(request))
    return _ok(seller={"name": info.name, "gst_no": info.gst_no})


@require_POST
@billing_view
def bank_details_save(request):
    details = profile.save_bank_details(request.user, **_payload(request))
    return _ok(bank={"bank_name": details.bank_name, "account_number": details.account_number})


@require_GET
@billing_view
def dashboard(request):
    return _ok(summary=dashboard_summary(request.user).as_dict())
