"""Tests for the bounded cheapest-combination search."""

import pytest

from shop_planner.catalog import ReferenceTables, default_inventories
from shop_planner.exceptions import InvalidInputError
from shop_planner.models import Item, ItemCategory, Store, StoreInventory
from shop_planner.planning import AvailabilityIndex, CombinationSearch, CostModel


def _search(inventories=None, max_size=3):
    index = AvailabilityIndex(default_inventories() if inventories is None else inventories)
    return CombinationSearch(CostModel(ReferenceTables(), index), index, max_size=max_size)


def _items(*names):
    return [Item(name=n, category=c) for n, c in names]


BREAD = ("bread", ItemCategory.BAKERY)
MILK = ("milk", ItemCategory.DAIRY)
CHEESE = ("cheese", ItemCategory.DAIRY)
CHICKEN = ("chicken", ItemCategory.MEAT)
CAVIAR = ("caviar", ItemCategory.OTHER)


class TestCombinationSearch:
    def test_single_cheap_store_wins(self, aldi, tesco):
        result = _search().search(_items(BREAD, MILK), [tesco, aldi])
        assert [r.store.id for r in result.recommendations] == ["aldi"]
        assert result.recommendations[0].subtotal == 314.5
        assert result.total_cost == 314.5
        assert result.feasible

    def test_split_across_stores_when_cheaper(self, aldi, tesco):
        result = _search().search(_items(BREAD, CHEESE), [aldi, tesco])
        by_store = {r.store.id: [i.name for i in r.items] for r in result.recommendations}
        assert by_store == {"aldi": ["bread"], "tesco": ["cheese"]}
        assert result.total_cost == 352.0

    def test_each_item_assigned_once(self, supermarkets):
        items = _items(BREAD, MILK, CHEESE, CHICKEN)
        result = _search().search(items, supermarkets)
        assigned = [i.name for r in result.recommendations for i in r.items]
        assert sorted(assigned) == sorted(i.name for i in items)
        assert result.total_cost == pytest.approx(sum(r.subtotal for r in result.recommendations))

    def test_k1_picks_cheaper_store(self, aldi, tesco, sainsburys):
        inventories = [
            StoreInventory(store_id="aldi", available_item_names={"bread"}, price_multiplier=0.85),
            StoreInventory(store_id="tesco", available_item_names={"chicken"}, price_multiplier=1.0),
            StoreInventory(
                store_id="sainsburys", available_item_names={"chicken"}, price_multiplier=1.05
            ),
        ]
        result = _search(inventories).search(
            _items(CHICKEN), [aldi, tesco, sainsburys], max_stores=1
        )
        assert [r.store.id for r in result.recommendations] == ["tesco"]
        assert result.total_cost == 800.0
        assert result.largest_subset_size == 1

    def test_tie_broken_by_store_id(self):
        inventories = [
            StoreInventory(store_id="b-store", available_item_names={"chicken"}),
            StoreInventory(store_id="a-store", available_item_names={"chicken"}),
        ]
        stores = [Store(id="b-store", name="B"), Store(id="a-store", name="A")]
        result = _search(inventories).search(_items(CHICKEN), stores, max_stores=1)
        assert [r.store.id for r in result.recommendations] == ["a-store"]

    def test_never_exceeds_subset_bound(self):
        stores = [Store(id=f"s{i}", name=f"Shop {i}") for i in range(4)]
        result = _search([]).search(_items(BREAD), stores, max_stores=2)
        assert result.largest_subset_size == 2
        # C(4,1) + C(4,2)
        assert result.subsets_evaluated == 10

    @pytest.mark.parametrize("k", [0, 4])
    def test_rejects_out_of_range_k(self, aldi, k):
        with pytest.raises(InvalidInputError):
            _search().search(_items(BREAD), [aldi], max_stores=k)

    def test_partial_plan_reports_unfulfilled(self, aldi, tesco):
        result = _search().search(_items(BREAD, CAVIAR), [aldi, tesco], allow_partial=True)
        assert [r.store.id for r in result.recommendations] == ["aldi"]
        assert [i.name for i in result.unfulfilled_items] == ["caviar"]
        assert not result.feasible

    def test_infeasible_without_partial(self, aldi, tesco):
        result = _search().search(_items(BREAD, CAVIAR), [aldi, tesco])
        assert result.recommendations == []
        assert [i.name for i in result.unfulfilled_items] == ["bread", "caviar"]
        assert result.total_cost == 0.0

    def test_input_order_does_not_matter(self, supermarkets):
        items = _items(BREAD, CHEESE, CHICKEN)
        forward = _search().search(items, supermarkets)
        backward = _search().search(items, list(reversed(supermarkets)))
        assert forward.model_dump() == backward.model_dump()
