"""
Tests for the instance context.
"""

from fizbin import Context


class TestContext:
    """Test dict-like access and history on Context"""

    def test_item_access(self):
        """Test reading and writing values like a dict"""
        context = Context(values={"amount": 0})
        context["amount"] += 1

        assert context["amount"] == 1
        assert context.get("amount") == 1
        assert context.get("missing", "default") == "default"
        assert "amount" in context
        assert "missing" not in context
        assert list(context) == ["amount"]
        assert len(context) == 1

    def test_set_and_update(self):
        """Test set and update write through to the values"""
        context = Context()
        context.set("a", 1)
        context.update({"b": 2, "a": 3})
        assert context.values == {"a": 3, "b": 2}

    def test_as_dict_is_a_copy(self):
        """Test as_dict does not expose the live values"""
        context = Context(values={"a": 1})
        snapshot = context.as_dict()
        snapshot["a"] = 2
        assert context["a"] == 1

    def test_last_state(self):
        """Test last_state follows the state history"""
        context = Context()
        assert context.last_state is None
        context.state_history.extend(["empty", "filling"])
        assert context.last_state == "filling"
