from .user import User, Role, ExternalLogin
from .audit import ActivityLog
from .settings import SystemSettings
from .customer import Customer, CustomerTransaction, InternalExchange
from .partner import PartnerAccount, PartnerTransaction
from .bank_account import BankAccount
from .cashbox import CashboxRequest, cashbox_balances, cashbox_balance, bank_account_balance
from .transfer import DomesticTransfer, AccountTransfer
from .exchange import ForeignTransaction, CommissionTransfer
from .expense import Expense, Amanat

__all__ = [
    'User', 'Role', 'ExternalLogin', 'ActivityLog', 'SystemSettings',
    'Customer', 'CustomerTransaction', 'InternalExchange',
    'PartnerAccount', 'PartnerTransaction', 'BankAccount',
    'CashboxRequest', 'cashbox_balances', 'cashbox_balance', 'bank_account_balance',
    'DomesticTransfer', 'AccountTransfer', 'ForeignTransaction',
    'CommissionTransfer', 'Expense', 'Amanat'
]
