"""
Balance arithmetic.

Pure functions converting between the stored (magnitude, sign) pair and a
signed balance, and computing the next balance for a movement. Nothing here
touches the database.

Sign convention, shared by both account kinds: a positive signed balance is
in the counterparty's favour.

- Supplier: positive means we owe the supplier. Purchases raise it,
  payments and returns lower it.
- Client: negative means the client owes us. Sales lower it, payments and
  returns raise it.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Tuple

from ledger_backend.app.core.exceptions import ErrorCode, InvalidAmountError, ValidationError
from ledger_backend.app.models.ledger_enums import AccountKind, BalanceSign, LedgerEntryType

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
# Exclusive upper bound of NUMERIC(14, 2)
MAX_AMOUNT = Decimal("1e12")

# +1 raises the signed balance, -1 lowers it
_DIRECTION = {
    (AccountKind.SUPPLIER, LedgerEntryType.PAYMENT): -1,
    (AccountKind.SUPPLIER, LedgerEntryType.PURCHASE): 1,
    (AccountKind.SUPPLIER, LedgerEntryType.RETURN): -1,
    (AccountKind.CLIENT, LedgerEntryType.PAYMENT): 1,
    (AccountKind.CLIENT, LedgerEntryType.SALE): -1,
    (AccountKind.CLIENT, LedgerEntryType.RETURN): 1,
}


def normalize_amount(raw: Any) -> Decimal:
    """
    Coerce a caller-supplied amount to a positive Decimal rounded to cents.

    Raises:
        InvalidAmountError: for non-numeric, non-finite, zero or negative input
            (including values that round to zero) and for magnitudes of
            ``MAX_AMOUNT`` or more.
    """
    if raw is None or isinstance(raw, bool):
        raise InvalidAmountError(raw)
    try:
        value = raw if isinstance(raw, Decimal) else Decimal(str(raw).strip())
        if not value.is_finite() or abs(value) >= MAX_AMOUNT:
            raise InvalidAmountError(raw)
        value = value.quantize(CENT, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidAmountError(raw)

    if value <= 0:
        raise InvalidAmountError(raw)
    return value


def to_signed(magnitude: Any, sign: BalanceSign) -> Decimal:
    """Signed view of a stored balance. A debit zero stays ``-0``."""
    magnitude = Decimal(magnitude)
    return magnitude.copy_negate() if BalanceSign(sign) == BalanceSign.DEBIT else magnitude


def from_signed(signed: Any) -> Tuple[Decimal, BalanceSign]:
    """Split a signed balance into (magnitude, sign)."""
    signed = Decimal(signed)
    sign = BalanceSign.DEBIT if signed.is_signed() else BalanceSign.CREDIT
    return abs(signed), sign


def movement_direction(kind: AccountKind, entry_type: LedgerEntryType) -> int:
    try:
        return _DIRECTION[(AccountKind(kind), LedgerEntryType(entry_type))]
    except KeyError:
        raise ValidationError(
            f"A {LedgerEntryType(entry_type).value} entry cannot be posted to a {AccountKind(kind).value} account",
            details={"kind": AccountKind(kind).value, "type": LedgerEntryType(entry_type).value}
        )


def apply_movement(kind: AccountKind, entry_type: LedgerEntryType, current_signed: Decimal,
                   amount: Decimal) -> Decimal:
    """Next signed balance after a movement of ``amount`` (already positive)."""
    result = Decimal(current_signed) + movement_direction(kind, entry_type) * Decimal(amount)
    if abs(result) >= MAX_AMOUNT:
        raise ValidationError(
            f"Balance {result} is out of range",
            details={"balance": str(result), "limit": str(MAX_AMOUNT)},
            error_code=ErrorCode.INVALID_INPUT
        )
    return result


def apply_payment(kind: AccountKind, current_signed: Decimal, amount: Decimal) -> Decimal:
    """
    Next signed balance after a payment.

    Supplier: ``current - amount`` (we pay down what we owe).
    Client: ``current + amount`` (the client pays down their debt).
    """
    return apply_movement(kind, LedgerEntryType.PAYMENT, current_signed, amount)


def split_delta(delta: Decimal) -> Tuple[Decimal, Decimal]:
    """
    (debit, credit) columns for a balance change.

    Increases go to credit, decreases to debit, so
    ``previous + credit - debit == next`` for every entry.
    """
    delta = Decimal(delta)
    if delta < 0:
        return -delta, ZERO
    return ZERO, delta
