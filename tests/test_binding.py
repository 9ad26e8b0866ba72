"""Tests for wildcard pattern compilation and the per-exchange binding table."""

import pytest

from testrabbit_core.broker.binding import Binding, BindingKey, BindingTable


class TestBindingKey:
    @pytest.mark.parametrize(
        "pattern, routing_key, expected",
        [
            ("order.new", "order.new", True),
            ("order.new", "order.new.extra", False),
            ("order.new", "order", False),
            ("order.new", "orderXnew", False),
            ("order.*", "order.new", True),
            ("order.*", "order.new.extra", False),
            ("order.*", "order.", False),
            ("order.*", "order", False),
            ("*.new", "order.new", True),
            ("*.new", "a.b.new", False),
            ("*.*", "a.b", True),
            ("order.#", "order.new", True),
            ("order.#", "order.new.extra", True),
            ("order.#", "order.", True),
            ("order.#", "order", False),
            ("#", "", True),
            ("#", "anything.at.all", True),
            ("#.new", "a.b.new", True),
            ("#.new", "a.b.old", False),
        ],
    )
    def test_matches(self, pattern, routing_key, expected):
        assert BindingKey(pattern).matches(routing_key) is expected

    def test_match_is_anchored(self):
        key = BindingKey("new")
        assert not key.matches("order.new")
        assert not key.matches("new.order")

    def test_hash_pattern_keeps_star_literal(self):
        key = BindingKey("a.*.#")
        assert key.matches("a.*.x")
        assert not key.matches("a.b.x")

    def test_regex_characters_are_literal(self):
        key = BindingKey("price+tax(1)")
        assert key.matches("price+tax(1)")
        assert not key.matches("pricetax1")

    def test_literal_pattern_compares_as_string(self):
        key = BindingKey("order.new")
        assert key.matches("order.new")
        assert not key.matches("order.new ")
        assert not key.matches("order.new\n")

    def test_equality_by_pattern(self):
        assert BindingKey("order.*") == BindingKey("order.*")
        assert BindingKey("order.*") != BindingKey("order.#")


class TestBinding:
    def test_matches_uses_compiled_key(self):
        binding = Binding(exchange_name="order", queue_name="q", pattern="order.*")
        assert binding.key == BindingKey("order.*")
        assert binding.matches("order.new")
        assert not binding.matches("other.new")


class TestBindingTable:
    def test_rebind_overwrites_destination(self):
        table = BindingTable("order")
        assert table.add("first", "order.new") is None
        assert table.add("second", "order.new") == "first"
        assert len(table) == 1
        assert table.to_dict() == {"order.new": "second"}

    def test_find_matching_returns_every_match_in_bind_order(self):
        table = BindingTable("order")
        table.add("exact", "order.new")
        table.add("star", "order.*")
        table.add("other", "invoice.*")
        table.add("hash", "order.#")
        matched = [b.queue_name for b in table.find_matching("order.new")]
        assert matched == ["exact", "star", "hash"]

    def test_remove(self):
        table = BindingTable("order")
        table.add("q", "order.new")
        removed = table.remove("order.new")
        assert removed.queue_name == "q"
        assert "order.new" not in table
        assert table.remove("order.new") is None

    def test_remove_queue(self):
        table = BindingTable("order")
        table.add("a", "order.new")
        table.add("a", "order.*")
        table.add("b", "order.#")
        assert table.remove_queue("a") == 2
        assert table.to_dict() == {"order.#": "b"}

    def test_iteration_is_a_snapshot(self):
        table = BindingTable("order")
        table.add("a", "x")
        table.add("b", "y")
        for binding in table:
            table.remove(binding.pattern)
        assert len(table) == 0
