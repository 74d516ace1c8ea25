# Workflows live in the submodules (services.ledger, services.cart, ...).
# Kept import-free: models import services.money at class-definition time.
