"""
Ledger enumerations.
"""

import enum


class AccountKind(str, enum.Enum):
    """Counterparty an account tracks."""
    SUPPLIER = "supplier"
    CLIENT = "client"


class AccountStatus(str, enum.Enum):
    """Account status enumeration."""
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class BalanceSign(str, enum.Enum):
    """
    Side of a stored balance.

    CREDIT is in the counterparty's favour (we owe a supplier, a client has
    an advance); DEBIT is against them.
    """
    CREDIT = "credit"
    DEBIT = "debit"


class LedgerEntryType(str, enum.Enum):
    """Ledger entry type enumeration."""
    INITIAL_BALANCE = "initial_balance"  # Opening balance, first entry of an account
    PAYMENT = "payment"  # Settlement recorded through a payment
    PURCHASE = "purchase"  # Goods bought from a supplier
    SALE = "sale"  # Goods sold to a client
    RETURN = "return"  # Goods sent back, reverses a purchase or sale
