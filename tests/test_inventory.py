"""Tests for the inventory store and the order ledger."""

from decimal import Decimal

from checkout_service.inventory import InventoryStore
from checkout_service.models import ChargeResult
from checkout_service.orders import OrderLedger


class TestInventoryStore:

    def test_find_by_ids_skips_unknown(self, db_session, products):
        found = InventoryStore(db_session).find_by_ids(["laptop", "ghost", "laptop"])

        assert list(found) == ["laptop"]
        assert found["laptop"].price == Decimal("1500")

    def test_find_by_id(self, db_session, products):
        store = InventoryStore(db_session)

        assert store.find_by_id("mouse").name == "Mouse"
        assert store.find_by_id("ghost") is None

    def test_conditional_decrement_applies_when_stock_suffices(self, db_session, products, stock):
        store = InventoryStore(db_session)

        assert store.conditional_decrement("mouse", 7) is True
        db_session.commit()

        assert stock("mouse") == 0

    def test_conditional_decrement_refuses_to_go_negative(self, db_session, products, stock):
        store = InventoryStore(db_session)

        assert store.conditional_decrement("mouse", 8) is False
        db_session.commit()

        assert stock("mouse") == 7

    def test_conditional_decrement_unknown_product(self, db_session, products):
        assert InventoryStore(db_session).conditional_decrement("ghost", 1) is False

    def test_last_unit_can_only_be_sold_once(self, session_factory, products, stock):
        with session_factory() as first, session_factory() as second:
            assert InventoryStore(first).conditional_decrement("laptop", 10) is True
            first.commit()
            assert InventoryStore(second).conditional_decrement("laptop", 1) is False

        assert stock("laptop") == 0

    def test_add_product_derives_slug(self, db_session):
        product = InventoryStore(db_session).add_product("Wireless  Mouse Pad", "9.99", 3)

        assert product.slug == "wireless-mouse-pad"
        assert product.id


class TestOrderLedger:

    def test_create_and_list_for_buyer(self, db_session):
        ledger = OrderLedger(db_session)
        charge = ChargeResult(success=True, transaction_id="tr_1", status="submitted_for_settlement",
                              raw={"transactionId": "tr_1"})
        line_items = [{"_id": "mouse", "name": "Mouse", "price": "25.00", "qty": 2}]

        ledger.create("order-1", "buyer-1", line_items, Decimal("50"), charge)
        ledger.create("order-2", "buyer-2", line_items, Decimal("50"), charge)
        db_session.commit()

        orders = ledger.list_for_buyer("buyer-1")
        assert [o.id for o in orders] == ["order-1"]
        assert orders[0].payment == {"transactionId": "tr_1"}
        assert orders[0].status == "Not Process"
        assert ledger.get("order-2").buyer_id == "buyer-2"
        assert ledger.get("missing") is None
