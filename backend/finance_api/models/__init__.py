from .cash_transaction import CashTransaction
from .cost import Cost
from .employee import Employee
from .monthly_budget import MonthlyBudget
from .notification import Notification
from .pending_cost import PendingCost
from .salary_payment import SalaryPayment
from .wallet import Wallet, WalletTransaction, WalletTransfer

__all__ = [
    "Employee",
    "SalaryPayment",
    "PendingCost",
    "Cost",
    "Wallet",
    "WalletTransaction",
    "WalletTransfer",
    "CashTransaction",
    "MonthlyBudget",
    "Notification",
]
