"""
Ledger service tests: payments and movements against real storage.
"""

from datetime import date
from decimal import Decimal

import pytest

from ledger_backend.app.core.exceptions import (
    AccountNotFoundError, ErrorCode, InvalidAmountError, ValidationError
)
from ledger_backend.app.models.ledger_enums import AccountKind, BalanceSign, LedgerEntryType


@pytest.mark.asyncio
async def test_supplier_payment_updates_balance_and_ledger(supplier, ledger, ledger_query, accounts):
    receipt = await ledger.record_payment(supplier.id, 200, date(2024, 2, 1), "cash", reference="REC-1")

    assert receipt.balance_after == Decimal("300.00")
    assert receipt.payment.id is not None
    assert receipt.entry.payment_id == receipt.payment.id

    account = await accounts.get_account(supplier.id)
    assert account.balance_magnitude == Decimal("300.00")
    assert account.balance_sign == BalanceSign.CREDIT
    assert account.total_paid == 0  # tracked for clients only

    entries = await ledger_query.list_entries(supplier.id)
    assert [e.entry_type for e in entries] == [LedgerEntryType.INITIAL_BALANCE, LedgerEntryType.PAYMENT]
    payment_entry = entries[-1]
    assert payment_entry.debit == Decimal("200.00")
    assert payment_entry.credit == 0
    assert payment_entry.balance_after == Decimal("300.00")
    assert payment_entry.reference == "REC-1"
    assert payment_entry.description == "Payment cash"


@pytest.mark.asyncio
async def test_client_payment_reduces_debt_and_tracks_total_paid(client_account, ledger, accounts):
    receipt = await ledger.record_payment(
        client_account.id, "300", date(2024, 2, 1), "cheque", note="partial"
    )

    assert receipt.balance_after == Decimal("-700.00")
    assert receipt.entry.credit == Decimal("300.00")
    assert receipt.entry.debit == 0
    assert receipt.entry.description == "Payment cheque: partial"

    account = await accounts.get_account(client_account.id)
    assert account.signed_balance == Decimal("-700.00")
    assert account.balance_sign == BalanceSign.DEBIT
    assert account.total_paid == Decimal("300.00")


@pytest.mark.asyncio
async def test_sequential_payments_accumulate(supplier, ledger, ledger_query):
    await ledger.record_payment(supplier.id, 100, date(2024, 2, 1), "cash")
    await ledger.record_payment(supplier.id, 100, date(2024, 2, 1), "cash")

    assert await ledger_query.current_balance(supplier.id) == Decimal("300.00")
    payments = await ledger_query.list_payments(supplier.id)
    assert len(payments) == 2


@pytest.mark.asyncio
async def test_overpayment_flips_sign(supplier, ledger, accounts):
    receipt = await ledger.record_payment(supplier.id, 650, date(2024, 2, 1), "transfer")

    assert receipt.balance_after == Decimal("-150.00")
    account = await accounts.get_account(supplier.id)
    assert account.balance_magnitude == Decimal("150.00")
    assert account.balance_sign == BalanceSign.DEBIT


@pytest.mark.asyncio
@pytest.mark.parametrize("amount", [0, -50, "abc"])
async def test_invalid_amount_writes_nothing(supplier, ledger, ledger_query, amount):
    with pytest.raises(InvalidAmountError):
        await ledger.record_payment(supplier.id, amount, date(2024, 2, 1), "cash")

    assert await ledger_query.list_payments(supplier.id) == []
    assert len(await ledger_query.list_entries(supplier.id)) == 1
    assert await ledger_query.current_balance(supplier.id) == Decimal("500.00")


@pytest.mark.asyncio
async def test_missing_method_rejected(supplier, ledger):
    with pytest.raises(ValidationError):
        await ledger.record_payment(supplier.id, 10, date(2024, 2, 1), "  ")


@pytest.mark.asyncio
async def test_unknown_account_rejected(ledger, ledger_query, supplier):
    with pytest.raises(AccountNotFoundError) as exc_info:
        await ledger.record_payment(9999, 100, date(2024, 2, 1), "cash")
    assert exc_info.value.error_code == ErrorCode.NOT_FOUND

    # Nothing leaked onto the existing account either
    assert await ledger_query.list_payments(supplier.id) == []


@pytest.mark.asyncio
async def test_back_dated_payment_rejected(supplier, ledger, ledger_query):
    await ledger.record_payment(supplier.id, 50, date(2024, 3, 1), "cash")

    with pytest.raises(ValidationError) as exc_info:
        await ledger.record_payment(supplier.id, 50, date(2024, 2, 1), "cash")
    assert exc_info.value.details["latest_entry_date"] == "2024-03-01"
    assert await ledger_query.current_balance(supplier.id) == Decimal("450.00")


@pytest.mark.asyncio
async def test_payment_accepts_iso_date_string(supplier, ledger):
    receipt = await ledger.record_payment(supplier.id, 25, "2024-02-10", "cash")
    assert receipt.payment.date == date(2024, 2, 10)


@pytest.mark.asyncio
async def test_purchase_raises_supplier_balance(supplier, ledger, accounts):
    entry = await ledger.post_movement(
        supplier.id, LedgerEntryType.PURCHASE, "250.40", date(2024, 2, 5), reference="INV-77"
    )

    assert entry.credit == Decimal("250.40")
    assert entry.debit == 0
    assert entry.balance_after == Decimal("750.40")
    assert entry.description == "Purchase"
    assert (await accounts.get_account(supplier.id)).signed_balance == Decimal("750.40")


@pytest.mark.asyncio
async def test_sale_and_return_on_client(client_account, ledger):
    sale = await ledger.post_movement(client_account.id, "sale", 400, date(2024, 2, 5))
    assert sale.balance_after == Decimal("-1400.00")
    assert sale.debit == Decimal("400.00")

    returned = await ledger.post_movement(
        client_account.id, LedgerEntryType.RETURN, 100, date(2024, 2, 6), description="Damaged goods"
    )
    assert returned.balance_after == Decimal("-1300.00")
    assert returned.description == "Damaged goods"


@pytest.mark.asyncio
async def test_movement_type_checks(supplier, client_account, ledger):
    with pytest.raises(ValidationError):
        await ledger.post_movement(supplier.id, LedgerEntryType.SALE, 10, date(2024, 2, 1))
    with pytest.raises(ValidationError):
        await ledger.post_movement(client_account.id, LedgerEntryType.PURCHASE, 10, date(2024, 2, 1))
    with pytest.raises(ValidationError):
        await ledger.post_movement(supplier.id, LedgerEntryType.PAYMENT, 10, date(2024, 2, 1))
    with pytest.raises(ValidationError):
        await ledger.post_movement(supplier.id, "refund", 10, date(2024, 2, 1))


@pytest.mark.asyncio
async def test_running_balance_invariant(supplier, ledger, ledger_query):
    await ledger.post_movement(supplier.id, LedgerEntryType.PURCHASE, 120, date(2024, 2, 1))
    await ledger.record_payment(supplier.id, 700, date(2024, 2, 2), "cash")
    await ledger.post_movement(supplier.id, LedgerEntryType.RETURN, 30, date(2024, 2, 3))

    entries = await ledger_query.list_entries(supplier.id)
    previous = Decimal("0")
    for entry in entries:
        assert entry.debit == 0 or entry.credit == 0
        assert previous + entry.credit - entry.debit == entry.balance_after
        previous = entry.balance_after
    assert previous == Decimal("-110.00")


@pytest.mark.asyncio
async def test_payments_from_zero_step_in_call_order(accounts, ledger, ledger_query):
    account = await accounts.create_account(AccountKind.CLIENT, {"code": "CLI-ZERO", "name": "Fresh Start"})

    first = await ledger.record_payment(account.id, 100, date(2024, 2, 1), "cash")
    second = await ledger.record_payment(account.id, 100, date(2024, 2, 1), "cash")
    assert (first.balance_after, second.balance_after) == (Decimal("100.00"), Decimal("200.00"))

    entries = await ledger_query.list_entries(account.id)
    assert [e.id for e in entries] == [first.entry.id, second.entry.id]
    assert [e.balance_after for e in entries] == [Decimal("100.00"), Decimal("200.00")]


@pytest.mark.asyncio
async def test_out_of_range_amount_writes_nothing(supplier, ledger, ledger_query):
    with pytest.raises(InvalidAmountError):
        await ledger.record_payment(supplier.id, "12345678901234567.89", date(2024, 2, 1), "cash")

    assert await ledger_query.list_payments(supplier.id) == []
    assert await ledger_query.current_balance(supplier.id) == Decimal("500.00")


@pytest.mark.asyncio
async def test_debit_zero_opening_keeps_its_sign(accounts):
    account = await accounts.create_account(
        AccountKind.CLIENT, {"code": "CLI-D0", "name": "Settled"}, opening_balance=0, opening_sign=BalanceSign.DEBIT
    )

    stored = await accounts.get_account(account.id)
    assert stored.balance_sign == BalanceSign.DEBIT
    assert stored.signed_balance.is_signed()
    assert stored.signed_balance == 0
