"""Tests for the relationship aggregator and implied-relationship engine."""

from archflow.graph.aggregator import (
    RelationshipSet,
    aggregate,
    direct_relationships,
    expand,
    implied_allowed,
    implied_relationships,
)
from archflow.graph.relations import InteractionStyle
from tests.helpers import parse_flow, relationship_pairs, relationship_strings


def processes(hierarchy, *texts):
    """Parse several flow texts, each as its own file."""
    result = []
    for i, text in enumerate(texts):
        result.extend(parse_flow(hierarchy, text, file_path=f"flow{i}.txt").items)
    return result


class TestDirectRelationships:
    """Tests for grouping steps into direct relationships."""

    def test_descriptions_are_process_names(self, hierarchy):
        ps = processes(
            hierarchy,
            "title Checkout\nweb -> orders : place\nweb -> orders : retry\n",
            "title Refund\nweb -> orders : refund\n",
        )

        assert relationship_strings(direct_relationships(ps)) == [
            "web -> orders (synchronous): Checkout | Refund",
        ]

    def test_sync_and_async_are_separate(self, hierarchy):
        ps = processes(
            hierarchy,
            "title T\norders -> stock-api : reserve\norders -->(1) stock-api : [t] reserved\n",
        )

        direct = direct_relationships(ps)

        assert len(direct) == 2
        assert ("orders", "stock-api", InteractionStyle.SYNCHRONOUS) in direct
        assert ("orders", "stock-api", InteractionStyle.ASYNCHRONOUS) in direct

    def test_direction_matters(self, hierarchy):
        ps = processes(hierarchy, "title T\nweb -> cart : a\ncart -> web : b\n")

        assert relationship_pairs(direct_relationships(ps)) == {("web", "cart"), ("cart", "web")}


class TestImpliedRelationships:
    """Tests for ancestor expansion."""

    def test_container_to_container_across_systems(self, scenario_hierarchy):
        ps = processes(scenario_hierarchy, "title Sync\na1 -> b1: fetch data\n")

        result = aggregate(scenario_hierarchy, ps)

        assert relationship_strings(result.direct) == ["a1 -> b1 (synchronous): Sync"]
        assert relationship_strings(result.implied) == [
            "a -> b (synchronous): Sync",
            "a -> b1 (synchronous): Sync",
            "a1 -> b (synchronous): Sync",
        ]
        assert len(result.relationships) == 4

    def test_no_relationship_inside_one_subtree(self, hierarchy):
        ps = processes(hierarchy, "title T\norders -> payments : charge\n")

        implied = implied_relationships(hierarchy, direct_relationships(ps))

        assert len(implied) == 0

    def test_sibling_containers(self, hierarchy):
        ps = processes(hierarchy, "title T\ncart -> orders : order\n")

        implied = implied_relationships(hierarchy, direct_relationships(ps))

        assert relationship_pairs(implied) == {
            ("cart", "order-api"),
            ("web", "orders"),
            ("web", "order-api"),
        }

    def test_actor_is_never_expanded(self, hierarchy):
        ps = processes(hierarchy, "title T\ncustomer -> web-ui : browse\n")

        implied = implied_relationships(hierarchy, direct_relationships(ps))

        assert relationship_pairs(implied) == {("customer", "web"), ("customer", "shop")}

    def test_exclusion_of_containment_and_self_pairs(self, hierarchy):
        ps = processes(
            hierarchy,
            "title A\ncart -> orders : x\norders -> stock : y\nweb-ui -> cart : z\n",
            "title B\npayments -> bank : w\nstock -> order-db : v\ncustomer -> web : u\n",
        )

        result = aggregate(hierarchy, ps)

        for relationship in result.implied:
            source, destination = relationship.source, relationship.destination
            assert source.key != destination.key
            assert not hierarchy.is_ancestor(source, destination)
            assert not hierarchy.is_ancestor(destination, source)

    def test_same_description_on_existing_pair_is_not_implied(self, hierarchy):
        ps = processes(
            hierarchy,
            "title T\norders -> stock : reserve\norder-api -> stock-api : reserve\n",
        )

        result = aggregate(hierarchy, ps)

        assert ("order-api", "stock-api", InteractionStyle.SYNCHRONOUS) not in result.implied
        assert ("order-api", "stock-api", InteractionStyle.SYNCHRONOUS) in result.relationships

    def test_different_description_is_merged_on_existing_pair(self, hierarchy):
        ps = processes(
            hierarchy,
            "title Reserve\norders -> stock : reserve\n",
            "title Audit\norder-api -> stock-api : audit\n",
        )

        result = aggregate(hierarchy, ps)
        merged = result.relationships.get(("order-api", "stock-api", InteractionStyle.SYNCHRONOUS))

        assert merged.description == "Audit\nReserve"

    def test_implied_descriptions_merge_in_first_seen_order(self, hierarchy):
        ps = processes(
            hierarchy,
            "title First\ncart -> stock : a\n",
            "title Second\norders -> stock : b\n",
        )

        implied = implied_relationships(hierarchy, direct_relationships(ps))
        shop_to_warehouse = implied.get(("shop", "warehouse", InteractionStyle.SYNCHRONOUS))

        assert shop_to_warehouse.description_lines == ["First", "Second"]

    def test_async_style_is_carried_up(self, hierarchy):
        ps = processes(hierarchy, "title T\norders -->(1) stock : [order-placed] reserve\n")

        implied = implied_relationships(hierarchy, direct_relationships(ps))

        assert {r.style for r in implied} == {InteractionStyle.ASYNCHRONOUS}
        assert ("shop", "warehouse", InteractionStyle.ASYNCHRONOUS) in implied


class TestExpand:
    """Tests for expand() and implied_allowed()."""

    def test_expand_skips_direct_pair(self, scenario_hierarchy):
        ps = processes(scenario_hierarchy, "title T\na1 -> b1 : x\n")
        direct = direct_relationships(ps)
        relationship = next(iter(direct))

        pairs = [(s.key, d.key) for s, d in expand(scenario_hierarchy, relationship, direct)]

        assert pairs == [("a1", "b"), ("a", "b1"), ("a", "b")]

    def test_implied_allowed(self, hierarchy):
        shop = hierarchy.resolve("shop")
        web = hierarchy.resolve("web")
        bank = hierarchy.resolve("bank")

        assert not implied_allowed(hierarchy, shop, shop)
        assert not implied_allowed(hierarchy, shop, web)
        assert not implied_allowed(hierarchy, web, shop)
        assert implied_allowed(hierarchy, web, bank)


class TestAggregate:
    """Tests for the combined aggregation pass."""

    def test_idempotent(self, hierarchy):
        ps = processes(
            hierarchy,
            "title A\ncart -> orders : x\norders -->(1) stock : [t] y\n",
            "title B\ncart -> orders : z\n",
        )

        first = aggregate(hierarchy, ps)
        second = aggregate(hierarchy, ps)

        assert relationship_strings(first.relationships) == relationship_strings(
            second.relationships
        )

    def test_one_relationship_per_key(self, hierarchy):
        ps = processes(
            hierarchy,
            "title A\ncart -> orders : x\nweb-ui -> payments : y\n",
            "title B\ncart -> payments : z\n",
        )

        result = aggregate(hierarchy, ps)
        keys = [r.key for r in result.relationships]

        assert len(keys) == len(set(keys))

    def test_direct_relationships_come_first(self, hierarchy):
        ps = processes(hierarchy, "title A\ncart -> orders : x\n")

        result = aggregate(hierarchy, ps)

        assert next(iter(result.relationships)).key == (
            "cart",
            "orders",
            InteractionStyle.SYNCHRONOUS,
        )

    def test_empty_input(self, hierarchy):
        result = aggregate(hierarchy, [])

        assert len(result.relationships) == 0
        assert isinstance(result.direct, RelationshipSet)
