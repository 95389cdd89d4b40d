from types import SimpleNamespace

from src.shipguard.data.config_repository import SupabaseItemLookup
from src.shipguard.models.domain import OrderDraft, OrderLine
from src.shipguard.services.errors import FailureKind, FailureLog
from src.shipguard.services.orders.payment_terms import FinancingMaterialsCheck


class FakeItems:
    def __init__(self, accounts):
        self.accounts = accounts
        self.calls = []

    def asset_account(self, item_id):
        self.calls.append(item_id)
        return self.accounts.get(item_id)


def _check(items, failures=None):
    return FinancingMaterialsCheck(
        items=items,
        failures=failures or FailureLog(),
        terms_id="8",
        location_id="17",
        asset_account_id="726",
    )


def _order(terms="8", lines=None, materials_order=False):
    return OrderDraft(terms=terms, materials_order=materials_order, lines=lines or [])


def test_financed_cabinet_order_is_flagged():
    items = FakeItems({"5521": "726", "5522": "726"})
    order = _order(
        lines=[
            OrderLine(item_text="CAB-1", item_id="5500", location_id="3"),
            OrderLine(item_text="CAB-2", item_id="5521", location_id="17"),
            OrderLine(item_text="CAB-3", item_id="5522", location_id="17"),
        ]
    )

    assert _check(items).apply(order) is True
    assert order.materials_order is True
    assert items.calls == ["5521"]


def test_other_terms_are_skipped():
    items = FakeItems({"5521": "726"})
    order = _order(terms="2", lines=[OrderLine(item_text="CAB-2", item_id="5521", location_id="17")])

    assert _check(items).apply(order) is False
    assert order.materials_order is False
    assert items.calls == []


def test_already_flagged_order_is_left_alone():
    items = FakeItems({"5521": "726"})
    order = _order(materials_order=True, lines=[OrderLine(item_text="CAB-2", item_id="5521", location_id="17")])
    assert _check(items).apply(order) is False
    assert items.calls == []


def test_other_asset_accounts_do_not_flag():
    order = _order(lines=[OrderLine(item_text="SVC-1", item_id="9000", location_id="17")])
    assert _check(FakeItems({"9000": "540"})).apply(order) is False
    assert order.materials_order is False


def test_lookup_errors_are_reported():
    class BrokenItems:
        def asset_account(self, item_id):
            raise RuntimeError("items table unavailable")

    failures = FailureLog()
    order = _order(lines=[OrderLine(item_text="CAB-2", item_id="5521", location_id="17")])

    assert _check(BrokenItems(), failures).apply(order) is False
    assert failures.kinds() == [FailureKind.UNEXPECTED]


def test_supabase_item_lookup_normalizes_account():
    class Query:
        def __init__(self):
            self.filters = {}

        def select(self, column):
            return self

        def eq(self, column, value):
            self.filters[column] = value
            return self

        def limit(self, n):
            return self

        def execute(self):
            data = [{"asset_account": 726}] if self.filters.get("item_id") == "5521" else []
            return SimpleNamespace(data=data)

    client = SimpleNamespace(table=lambda name: Query())
    lookup = SupabaseItemLookup(client=client, table="items")

    assert lookup.asset_account("5521") == "726"
    assert lookup.asset_account("1") is None
