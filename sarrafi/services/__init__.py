# Importing the modules registers their cashbox handlers.
from sarrafi.services import (cashbox_service, customer_service, partner_service,  # noqa: F401
                              transfer_service, exchange_service, expense_service,
                              report_service, backup_service, admin_service)
