"""
Tests for the fee record and receipt repositories against a mocked motor
database.

Covers:
- Query shapes (filters, sort order, ISO date strings)
- Insert id handling
- Driver errors surfaced as PersistenceError
"""

import re

import pytest
from datetime import date
from unittest.mock import AsyncMock, MagicMock

from bson import ObjectId
from pymongo.errors import PyMongoError

from app.core.exceptions import PersistenceError
from app.models.ledger import FeeStatus
from app.repositories.ledger_repo import LedgerRepository
from app.repositories.receipt_repo import ReceiptRepository
from app.schemas.receipt import ReceiptFilter
from tests.factories import make_entry, make_receipt, new_id


def _cursor(docs):
    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.to_list = AsyncMock(return_value=docs)
    return cursor


@pytest.fixture
def collection():
    return MagicMock()


@pytest.fixture
def db(collection):
    database = MagicMock()
    database.__getitem__.return_value = collection
    return database


def _fee_doc(student_id, amount, paid=0, status="pending", due="2024-01-01"):
    return {
        "_id": ObjectId(),
        "student_id": student_id,
        "amount_cents": amount,
        "paid_amount_cents": paid,
        "due_date": due,
        "status": status,
        "fee_type": "tuition",
    }


@pytest.mark.asyncio
async def test_list_outstanding_query_and_order(db, collection):
    sid = new_id()
    collection.find.return_value = _cursor([_fee_doc(sid, 500), _fee_doc(sid, 300, due="2024-02-01")])

    entries = await LedgerRepository(db).list_outstanding(sid)

    collection.find.assert_called_once_with({
        "student_id": sid,
        "status": {"$in": ["pending", "partial"]}
    })
    collection.find.return_value.sort.assert_called_once_with([("due_date", 1), ("created_at", 1)])
    assert [e.amount_cents for e in entries] == [500, 300]
    assert entries[1].due_date == date(2024, 2, 1)
    assert isinstance(entries[0].id, str)


@pytest.mark.asyncio
async def test_list_entries_treats_missing_amounts_as_zero(db, collection):
    doc = _fee_doc(new_id(), 500)
    doc["paid_amount_cents"] = None
    doc["description"] = None
    collection.find.return_value = _cursor([doc])

    [entry] = await LedgerRepository(db).list_entries(statuses=[FeeStatus.PENDING])

    assert collection.find.call_args.args[0] == {"status": {"$in": ["pending"]}}
    assert entry.paid_amount_cents == 0
    assert entry.description == ""


@pytest.mark.asyncio
async def test_get_entry_with_invalid_id_skips_query(db, collection):
    collection.find_one = AsyncMock()

    assert await LedgerRepository(db).get_entry("not-an-object-id") is None
    collection.find_one.assert_not_awaited()


@pytest.mark.asyncio
async def test_insert_entries_assigns_ids(db, collection):
    ids = [ObjectId(), ObjectId()]
    collection.insert_many = AsyncMock(return_value=MagicMock(inserted_ids=ids))
    sid = new_id()
    new_entries = [make_entry(sid, 100).model_copy(update={"id": None}) for _ in range(2)]

    saved = await LedgerRepository(db).insert_entries(new_entries)

    docs = collection.insert_many.await_args.args[0]
    assert all("_id" not in d for d in docs)
    assert docs[0]["due_date"] == "2024-01-01"
    assert [e.id for e in saved] == [str(i) for i in ids]


@pytest.mark.asyncio
async def test_save_payment_sets_payment_fields(db, collection):
    collection.update_one = AsyncMock()
    entry = make_entry(new_id(), 500, 500, status=FeeStatus.PAID, paid_date=date(2024, 3, 15))

    await LedgerRepository(db).save_payment(entry)

    query, update = collection.update_one.await_args.args
    assert query == {"_id": ObjectId(entry.id)}
    fields = update["$set"]
    assert fields["paid_amount_cents"] == 500
    assert fields["status"] == "paid"
    assert fields["paid_date"] == "2024-03-15"


@pytest.mark.asyncio
async def test_mark_overdue(db, collection):
    collection.update_many = AsyncMock(return_value=MagicMock(modified_count=2))

    updated = await LedgerRepository(db).mark_overdue(date(2024, 3, 15))

    query, update = collection.update_many.await_args.args
    assert query == {
        "status": {"$in": ["pending", "partial"]},
        "due_date": {"$lt": "2024-03-15"}
    }
    assert update["$set"]["status"] == "overdue"
    assert updated == 2


@pytest.mark.asyncio
async def test_driver_error_becomes_persistence_error(db, collection):
    collection.update_one = AsyncMock(side_effect=PyMongoError("connection reset"))

    with pytest.raises(PersistenceError) as exc:
        await LedgerRepository(db).save_payment(make_entry(new_id(), 500, 100))

    assert "Failed to update fee record" in str(exc.value)


@pytest.mark.asyncio
async def test_list_receipts_window_and_search(db, collection):
    receipt = make_receipt(new_id(), 500)
    doc = receipt.to_document()
    collection.find.return_value = _cursor([doc])

    receipts = await ReceiptRepository(db).list_receipts(ReceiptFilter(
        start_date=date(2024, 3, 1), end_date=date(2024, 3, 31), search="RCP-1"
    ))

    query = collection.find.call_args.args[0]
    assert query["payment_date"] == {"$gte": "2024-03-01", "$lte": "2024-03-31"}
    assert {"receipt_number": {"$regex": re.escape("RCP-1"), "$options": "i"}} in query["$or"]
    collection.find.return_value.sort.assert_called_once_with("created_at", -1)
    assert receipts[0].receipt_number == receipt.receipt_number
    assert receipts[0].id == receipt.id
