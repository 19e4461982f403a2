"""
Tests for guard expressions and the action table.
"""

import pytest

from fizbin import ActionTable, Context, Event, Guard, ResolutionError
from fizbin.core.expressions import GuardExpression


class TestGuardExpression:
    """Test parsing and evaluating guard expressions"""

    @pytest.mark.parametrize(
        "source,values,expected",
        [
            ("amount>=10", {"amount": 10}, True),
            ("amount>=10", {"amount": 9}, False),
            ("ambientLight < 0.5 and not manual", {"ambientLight": 0.2, "manual": False}, True),
            ("ambientLight < 0.5 and not manual", {"ambientLight": 0.2, "manual": True}, False),
            ("a or b", {"a": 0, "b": 3}, True),
            ("0 < level <= 3", {"level": 3}, True),
            ("0 < level <= 3", {"level": 4}, False),
            ("count * 2 - 1 == 5", {"count": 3}, True),
            ("mode in ['auto', 'eco']", {"mode": "eco"}, True),
            ("mode not in ('auto',)", {"mode": "auto"}, False),
            ("ready", {"ready": 1}, True),
            ("-delta > 0", {"delta": -1}, True),
        ],
    )
    def test_evaluate(self, source, values, expected):
        """Test expressions evaluate against context values"""
        guard = GuardExpression(source, values.keys())
        assert guard(Context(values=dict(values))) is expected

    def test_terms_are_collected(self):
        """Test referenced context variables are listed once each"""
        guard = GuardExpression("a > b and a < 10", ["a", "b", "c"])
        assert guard.terms == ["a", "b"]

    @pytest.mark.parametrize(
        "source,reason",
        [
            ("amount >", "invalid expression"),
            ("volume > 1", "term 'volume' is not a context variable"),
            ("amount.real > 1", "'Attribute' is not allowed"),
            ("len(amount) > 1", "not allowed"),
            ("amount[0] > 1", "'Subscript' is not allowed"),
            ("(lambda: 1)()", "not allowed"),
            ("amount > b'1'", "unsupported literal"),
        ],
    )
    def test_rejected_expressions(self, source, reason):
        """Test anything beyond comparisons over context terms is rejected"""
        with pytest.raises(ResolutionError, match=reason) as exc:
            GuardExpression(source, ["amount"])
        assert exc.value.kind == "guard"
        assert exc.value.name == source

    def test_missing_value_at_runtime(self):
        """Test a term removed from the context surfaces as KeyError"""
        guard = GuardExpression("amount > 1", ["amount"])
        with pytest.raises(KeyError):
            guard(Context())

    def test_works_on_plain_mappings(self):
        """Test expressions accept any mapping, not only Context"""
        assert GuardExpression("x == 'on'", ["x"])({"x": "on"}) is True


class TestGuard:
    """Test resolved guard objects"""

    def test_unless_negates(self):
        """Test negated guards invert the result and the label"""
        guard = Guard("ready", negate=True, fn=lambda c, e: c["ready"])
        assert guard({"ready": True}, Event("go")) is False
        assert guard({"ready": False}, Event("go")) is True
        assert guard.label == "!ready"
        assert Guard("ready").label == "ready"

    def test_unresolved_guard(self):
        """Test calling a guard without a function fails loudly"""
        with pytest.raises(RuntimeError, match="never resolved"):
            Guard("ready")({}, Event("go"))

    def test_equality_ignores_function(self):
        """Test guards compare by expression and negation"""
        assert Guard("x", fn=lambda c, e: True) == Guard("x", fn=lambda c, e: False)
        assert Guard("x") != Guard("x", negate=True)


class TestActionTable:
    """Test registering and resolving actions and guards"""

    def test_decorators(self):
        """Test decorator registration with and without names"""
        table = ActionTable()

        @table.action
        def add_water(context, event):
            return None

        @table.guard(name="isFull")
        def is_full(context, event):
            return True

        assert table.resolve_action("add_water") is add_water
        assert table.resolve_guard("isFull") is is_full
        assert "add_water" in table
        assert "isFull" in table
        assert table.action_names == ["add_water"]
        assert table.guard_names == ["isFull"]

    def test_unknown_action(self):
        """Test resolving a missing action raises ResolutionError"""
        with pytest.raises(ResolutionError, match="Unknown action 'nope'"):
            ActionTable().resolve_action("nope")

    def test_guard_falls_back_to_expression(self):
        """Test unregistered guard names compile as expressions"""
        guard = ActionTable().resolve_guard("amount >= 10", ["amount"])
        assert isinstance(guard, GuardExpression)
        assert guard({"amount": 12}) is True

    def test_merge(self):
        """Test merged tables prefer the other table's entries"""
        first = ActionTable(actions={"a": print, "b": print})
        second = ActionTable(actions={"b": repr}, guards={"g": bool})
        merged = first.merge(second)

        assert merged.resolve_action("a") is print
        assert merged.resolve_action("b") is repr
        assert merged.resolve_guard("g") is bool
        assert first.resolve_action("b") is print

    def test_tables_are_independent(self):
        """Test registrations never leak between tables"""
        first = ActionTable()
        first.register_action(print, "log")
        assert "log" not in ActionTable()
