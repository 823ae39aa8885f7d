import pytest
from conftest import DAY_MS, NOW
from sqlalchemy.exc import OperationalError

from mhyasi.core.errors import AccountLocked, ValidationError
from mhyasi.core.time import ms_to_datetime
from mhyasi.models import Invoice
from mhyasi.services import invoices, products


@pytest.fixture
def shop(make_user):
    return make_user("shopA", unlocked_until=NOW + DAY_MS)


def test_sale_decrements_stock_and_lists_invoice(db, shop, make_product):
    product = make_product(shop, qty=10)

    invoices.create_invoice(
        db, shop, "INV-1", "Ada", [{"product_id": product.id, "qty": 4}],
        total=10.0, now=NOW,
    )

    db.refresh(product)
    assert product.qty == 6
    listed = invoices.list_invoices(db, shop)
    assert len(listed) == 1
    payload = invoices.invoice_to_dict(listed[0])
    assert payload["items"] == [{"product_id": product.id, "qty": 4}]
    assert payload["customer"] == "Ada"
    assert payload["total"] == 10.0


def test_oversell_clamps_at_zero(db, shop, make_product):
    product = make_product(shop, qty=6)

    invoice = invoices.create_invoice(
        db, shop, "INV-2", None, [{"product_id": product.id, "qty": 100}],
        total=250.0, now=NOW,
    )

    db.refresh(product)
    assert product.qty == 0
    assert invoice.total == 250.0


def test_repeated_sales_never_go_negative(db, shop, make_product):
    product = make_product(shop, qty=5)
    for index, qty in enumerate([3, 3, 1, 7]):
        invoices.create_invoice(
            db, shop, f"INV-{index}", "", [{"product_id": product.id, "qty": qty}],
            now=NOW,
        )
        db.refresh(product)
        assert product.qty >= 0
    assert product.qty == 0


@pytest.mark.parametrize("unlocked_until", [None, NOW, NOW - 1])
def test_locked_account_writes_nothing(db, make_user, make_product, unlocked_until):
    user = make_user("locked", unlocked_until=unlocked_until)
    product = make_product(user, qty=10)

    with pytest.raises(AccountLocked):
        invoices.create_invoice(
            db, user, "INV-1", "", [{"product_id": product.id, "qty": 4}],
            now=NOW,
        )

    db.refresh(product)
    assert product.qty == 10
    assert db.query(Invoice).count() == 0


def test_foreign_and_missing_products_are_skipped(db, shop, make_user, make_product):
    other = make_user("shopB", unlocked_until=NOW + DAY_MS)
    own = make_product(shop, qty=10)
    foreign = make_product(other, qty=10)
    items = [
        {"product_id": foreign.id, "qty": 2},
        {"product_id": 9999, "qty": 1},
        {"product_id": own.id, "qty": 3},
    ]

    invoices.create_invoice(db, shop, "INV-3", "", items, now=NOW)

    db.refresh(own)
    db.refresh(foreign)
    assert own.qty == 7
    assert foreign.qty == 10
    stored = invoices.list_invoices(db, shop)[0]
    assert invoices.decode_items(stored.items) == items


def test_item_extras_round_trip(db, shop, make_product):
    product = make_product(shop, qty=10)
    items = [
        {"product_id": product.id, "qty": 1, "price": 2.5, "name": "Rice"},
        {"product_id": product.id, "qty": 2, "price": 2.5, "name": "Rice"},
    ]
    invoice = invoices.create_invoice(db, shop, "INV-4", "", items, now=NOW)
    assert invoices.decode_items(invoice.items) == items
    db.refresh(product)
    assert product.qty == 7


def test_server_stamps_creation_time(db, shop):
    invoice = invoices.create_invoice(db, shop, "INV-5", "", [], now=NOW)
    assert invoice.created_at == ms_to_datetime(NOW)


def test_missing_invoice_id_is_rejected(db, shop):
    with pytest.raises(ValidationError):
        invoices.create_invoice(db, shop, "  ", "", [], now=NOW)
    assert db.query(Invoice).count() == 0


@pytest.mark.parametrize(
    "item",
    [
        {"qty": 1},
        {"product_id": 1, "qty": 0},
        {"product_id": 1, "qty": -3},
        {"product_id": "1", "qty": 1},
    ],
)
def test_malformed_items_are_rejected(db, shop, item):
    with pytest.raises(ValidationError):
        invoices.create_invoice(db, shop, "INV-6", "", [item], now=NOW)
    assert db.query(Invoice).count() == 0


def test_oversell_beyond_integer_range_still_records(db, shop, make_product):
    product = make_product(shop, qty=10)
    items = [{"product_id": product.id, "qty": 2**70}]

    invoice = invoices.create_invoice(db, shop, "INV-7", "", items, now=NOW)

    db.refresh(product)
    assert product.qty == 0
    assert invoices.decode_items(invoice.items) == items
    assert db.query(Invoice).count() == 1


def test_out_of_range_product_id_is_skipped(db, shop, make_product):
    product = make_product(shop, qty=10)
    items = [
        {"product_id": 2**70, "qty": 1},
        {"product_id": product.id, "qty": 1},
    ]
    invoices.create_invoice(db, shop, "INV-8", "", items, now=NOW)
    db.refresh(product)
    assert product.qty == 9


def test_failed_decrement_rolls_back_whole_invoice(
    db, shop, make_product, monkeypatch
):
    first = make_product(shop, name="Rice", qty=10)
    second = make_product(shop, name="Oil", qty=10)
    calls = []

    def failing_decrement(session, user_id, product_id, qty):
        calls.append(product_id)
        if len(calls) == 2:
            raise OperationalError("UPDATE products", {}, Exception("disk I/O error"))
        return products.decrement_stock(session, user_id, product_id, qty)

    monkeypatch.setattr(invoices, "decrement_stock", failing_decrement)

    with pytest.raises(OperationalError):
        invoices.create_invoice(
            db, shop, "INV-9", "",
            [
                {"product_id": first.id, "qty": 4},
                {"product_id": second.id, "qty": 4},
            ],
            now=NOW,
        )

    assert calls == [first.id, second.id]
    db.refresh(first)
    db.refresh(second)
    assert first.qty == 10
    assert second.qty == 10
    assert db.query(Invoice).count() == 0
