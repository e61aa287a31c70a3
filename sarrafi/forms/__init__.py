from .auth import LoginForm, UserForm, UserUpdateForm, ExternalLoginForm, RoleForm
from .cashbox import (CashboxRequestForm, ResolveRequestForm, IncreaseBalanceForm,
                      CashboxSearchForm, BankAccountForm, LedgerFilterForm)
from .customer import (CustomerForm, CustomerUpdateForm, AccountTransferForm,
                       ReassignTransferForm, InternalExchangeForm)
from .partner import PartnerForm, SettlementForm, SettleByNameForm
from .transfer import DomesticTransferForm, TransferStatusForm, PayoutForm, TransferSearchForm
from .exchange import (InitiateForeignExchangeForm, CompleteForeignExchangeForm,
                       LogCommissionTransferForm, ExecuteCommissionTransferForm)
from .expense import ExpenseForm, AmanatForm
from .report import ReportForm

__all__ = [
    'LoginForm', 'UserForm', 'UserUpdateForm', 'ExternalLoginForm', 'RoleForm',
    'CashboxRequestForm', 'ResolveRequestForm', 'IncreaseBalanceForm',
    'CashboxSearchForm', 'BankAccountForm', 'LedgerFilterForm',
    'CustomerForm', 'CustomerUpdateForm', 'AccountTransferForm',
    'ReassignTransferForm', 'InternalExchangeForm',
    'PartnerForm', 'SettlementForm', 'SettleByNameForm',
    'DomesticTransferForm', 'TransferStatusForm', 'PayoutForm', 'TransferSearchForm',
    'InitiateForeignExchangeForm', 'CompleteForeignExchangeForm',
    'LogCommissionTransferForm', 'ExecuteCommissionTransferForm',
    'ExpenseForm', 'AmanatForm', 'ReportForm'
]
