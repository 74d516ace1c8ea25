from ..exceptions import LedgerValidationError
from ..models import BankDetails, SellerInfo
from .ledger import ledger_transaction

SELLER_FIELDS = ("name", "address", "city", "state", "state_code", "pincode",
                 "gst_no", "pan", "phone", "email", "website")
BANK_FIELDS = ("account_name", "bank_name", "account_number", "ifsc_code",
               "branch", "swift_code")


def _pick(fields, allowed, what):
    unknown = set(fields) - set(allowed)
    if unknown:
        raise LedgerValidationError(f"Unknown {what} fields: {', '.join(sorted(unknown))}")
    return {k: (v or "").strip() for k, v in fields.items()}


# Upsert: one row per owner
def save_seller_info(owner, **fields) -> SellerInfo:
    data = _pick(fields, SELLER_FIELDS, "seller")
    for key in ("gst_no", "pan"):
        if data.get(key):
            data[key] = data[key].upper()
    with ledger_transaction("save_seller_info", owner):
        info = SellerInfo.objects.filter(owner=owner).first() or SellerInfo(owner=owner)
        for key, value in data.items():
            setattr(info, key, value)
        if not (info.name or "").strip():
            raise LedgerValidationError("Business name is required")
        info.full_clean()
        info.save()
    return info


def save_bank_details(owner, **fields) -> BankDetails:
    data = _pick(fields, BANK_FIELDS, "bank")
    if data.get("ifsc_code"):
        data["ifsc_code"] = data["ifsc_code"].upper()
    with ledger_transaction("save_bank_details", owner):
        details = BankDetails.objects.filter(owner=owner).first() or BankDetails(owner=owner)
        for key, value in data.items():
            setattr(details, key, value)
        details.full_clean()
        details.save()
    return details
