"""Unit tests for compiling machine configurations."""

import pytest

from fizbin import ActionTable, ConfigError, ResolutionError, TriggerKind, compile
from fizbin.compiler import expand_sources
from fizbin.serialization import StateMachineConfig, TransitionSpec


def glass_config() -> dict:
    return {
        "id": "glass",
        "initial": "empty",
        "context": {"amount": 0},
        "states": ["empty", "filling", "full"],
        "transitions": [
            {"from": "empty", "to": "filling", "evt": "FILL", "actions": "addWater"},
            {"from": "filling", "to": "full", "when": "amount>=10"},
            {"from": "filling", "to": "filling", "evt": "FILL", "actions": "addWater"},
        ],
    }


def glass_table() -> ActionTable:
    table = ActionTable()

    @table.action(name="addWater")
    def add_water(context, event):
        context["amount"] += 1

    return table


class TestCompile:
    """Test compiling configurations into definitions"""

    def test_glass_definition(self):
        """Test the glass machine compiles into the expected shape"""
        definition = compile(glass_config(), glass_table())

        assert definition.id == "glass"
        assert definition.initial == "empty"
        assert definition.states == ("empty", "filling", "full")
        assert dict(definition.context) == {"amount": 0}
        assert len(definition.transitions) == 3

        filling = definition.state("filling")
        assert list(filling.events) == ["FILL"]
        assert filling.events["FILL"][0].target == "filling"
        assert len(filling.transients) == 1
        assert filling.transients[0].guard.expression == "amount>=10"
        assert filling.transients[0].kind is TriggerKind.TRANSIENT

    def test_accepts_config_struct(self):
        """Test compile accepts a StateMachineConfig as well as a mapping"""
        config = StateMachineConfig(
            id="switch",
            initial="off",
            states=["off", "on"],
            transitions=[
                TransitionSpec(from_="off", to="on", evt="toggle"),
                TransitionSpec(from_="on", to="off", evt="toggle"),
            ],
        )
        definition = compile(config)
        assert definition.state("off").events["toggle"][0].target == "on"

    def test_compile_is_deterministic(self):
        """Test compiling the same config twice gives equal definitions"""
        table = glass_table()
        first = compile(glass_config(), table)
        second = compile(glass_config(), table)

        assert first == second
        assert first.transitions == second.transitions
        assert first is not second

    def test_compile_does_not_mutate_config(self):
        """Test the context is copied rather than shared"""
        config = glass_config()
        definition = compile(config, glass_table())
        config["context"]["amount"] = 99

        assert definition.context["amount"] == 0

    def test_trigger_classification(self):
        """Test events win over timers and timers over guard-only transitions"""
        definition = compile(
            {
                "id": "kinds",
                "initial": "a",
                "context": {"ready": False},
                "states": ["a", "b", "c", "d"],
                "transitions": [
                    {"from": "a", "to": "b", "evt": "go", "when": "ready"},
                    {"from": "b", "to": "c", "timer": 1500},
                    {"from": "c", "to": "d", "when": "ready"},
                ],
            }
        )
        kinds = [t.kind for t in definition.transitions]
        assert kinds == [TriggerKind.EVENT, TriggerKind.TIMER, TriggerKind.TRANSIENT]
        assert definition.transitions[0].guard.expression == "ready"
        assert definition.transitions[1].delay_ms == 1500


class TestExpansion:
    """Test wildcard and multi-source expansion"""

    def test_wildcard_skips_target(self):
        """Test '*' expands to every state except the target"""
        definition = compile(
            {
                "id": "wild",
                "initial": "A",
                "states": ["A", "B", "C"],
                "transitions": [{"from": "*", "to": "B", "evt": "reset"}],
            }
        )
        pairs = [(t.source, t.target) for t in definition.transitions]

        assert pairs == [("A", "B"), ("C", "B")]
        assert all(t.wildcard for t in definition.transitions)
        assert all(t.event == "reset" for t in definition.transitions)

    def test_multi_source_shares_trigger(self):
        """Test a list of sources expands to one transition each"""
        definition = compile(
            {
                "id": "multi",
                "initial": "A",
                "states": ["A", "B", "C"],
                "transitions": [{"from": ["A", "C"], "to": "B", "evt": "GO"}],
            }
        )
        transitions = definition.transitions

        assert [(t.source, t.target) for t in transitions] == [("A", "B"), ("C", "B")]
        assert {t.event for t in transitions} == {"GO"}
        assert not any(t.wildcard for t in transitions)
        assert transitions[0].index == transitions[1].index == 0

    def test_multi_source_keeps_explicit_self_loop(self):
        """Test listing the target among sources keeps the self-loop"""
        spec = TransitionSpec(from_=["A", "B"], to="B", evt="GO")
        assert expand_sources(spec, ["A", "B", "C"]) == [("A", False), ("B", False)]

    def test_expansion_preserves_guard_and_actions(self):
        """Test guard and actions are carried onto each expansion"""
        table = ActionTable()
        table.register_action(lambda c, e: None, "log")
        definition = compile(
            {
                "id": "carry",
                "initial": "A",
                "context": {"n": 0},
                "states": ["A", "B", "C"],
                "transitions": [
                    {"from": "*", "to": "C", "evt": "x", "when": "n > 1", "actions": ["log"]}
                ],
            },
            table,
        )
        for transition in definition.transitions:
            assert transition.guard.expression == "n > 1"
            assert [a.name for a in transition.actions] == ["log"]


class TestTerminalStates:
    """Test terminal state detection"""

    def test_states_without_way_out_are_terminal(self):
        """Test a state with no outgoing transition is terminal"""
        definition = compile(glass_config(), glass_table())
        assert definition.terminal_states == ["full"]
        assert not definition.is_terminal("filling")

    def test_explicitly_marked_terminal(self):
        """Test states marked terminal stay terminal despite outgoing transitions"""
        definition = compile(
            {
                "id": "marked",
                "initial": "a",
                "states": ["a", "b"],
                "terminal": ["b"],
                "transitions": [
                    {"from": "a", "to": "b", "evt": "go"},
                    {"from": "b", "to": "a", "evt": "back"},
                ],
            }
        )
        assert definition.terminal_states == ["b"]


class TestConfigErrors:
    """Test structurally invalid configurations"""

    def test_unknown_initial_state(self):
        """Test an initial state missing from states is rejected"""
        config = glass_config()
        config["initial"] = "overflowing"
        with pytest.raises(ConfigError, match="Initial state 'overflowing' not found"):
            compile(config, glass_table())

    def test_transition_without_trigger(self):
        """Test a transition with no event, timer or guard is rejected"""
        config = {
            "id": "bad",
            "initial": "a",
            "states": ["a", "b"],
            "transitions": [{"from": "a", "to": "b"}],
        }
        with pytest.raises(ConfigError, match="no event, timer or guard") as exc:
            compile(config)
        assert exc.value.transition == "#0 a -> b"

    def test_event_and_timer_together(self):
        """Test a transition naming both an event and a timer is ambiguous"""
        config = {
            "id": "bad",
            "initial": "a",
            "states": ["a", "b"],
            "transitions": [{"from": "a", "to": "b", "evt": "go", "timer": 10}],
        }
        with pytest.raises(ConfigError, match="both an event and a timer"):
            compile(config)

    def test_unreachable_event_transition(self):
        """Test a transition shadowed by an unguarded one on the same event"""
        config = {
            "id": "shadowed",
            "initial": "a",
            "states": ["a", "b", "c"],
            "transitions": [
                {"from": "a", "to": "b", "evt": "go"},
                {"from": "a", "to": "c", "evt": "go"},
            ],
        }
        with pytest.raises(ConfigError, match="Unreachable transition") as exc:
            compile(config)
        assert exc.value.transition == "#1 a -> c on go"

    def test_guarded_transitions_may_share_an_event(self):
        """Test guarded transitions before an unguarded fallback are accepted"""
        definition = compile(
            {
                "id": "fallback",
                "initial": "a",
                "context": {"n": 0},
                "states": ["a", "b", "c"],
                "transitions": [
                    {"from": "a", "to": "b", "evt": "go", "when": "n > 1"},
                    {"from": "a", "to": "c", "evt": "go"},
                ],
            }
        )
        assert len(definition.state("a").events["go"]) == 2

    def test_wildcard_shadowed_by_explicit_transition(self):
        """Test a wildcard expansion behind an explicit unguarded transition"""
        config = {
            "id": "wild",
            "initial": "a",
            "states": ["a", "b", "c"],
            "transitions": [
                {"from": "a", "to": "c", "evt": "reset"},
                {"from": "*", "to": "b", "evt": "reset"},
            ],
        }
        with pytest.raises(ConfigError, match=r"#1 a -> b on reset"):
            compile(config)

    def test_when_and_unless_together(self):
        """Test a transition with both guard forms is ambiguous"""
        config = {
            "id": "bad",
            "initial": "a",
            "context": {"x": 1},
            "states": ["a", "b"],
            "transitions": [{"from": "a", "to": "b", "when": "x", "unless": "x"}],
        }
        with pytest.raises(ConfigError, match="both 'when' and 'unless'") as exc:
            compile(config)
        assert "a -> b" in str(exc.value)

    @pytest.mark.parametrize(
        "transition,message",
        [
            ({"from": "a", "to": "z", "evt": "go"}, "Unknown target state 'z'"),
            ({"from": "z", "to": "a", "evt": "go"}, "Unknown source state 'z'"),
            ({"from": ["a", "z"], "to": "b", "evt": "go"}, "Unknown source state 'z'"),
            ({"from": [], "to": "b", "evt": "go"}, "empty source list"),
        ],
    )
    def test_unknown_states_in_transitions(self, transition, message):
        """Test transitions must refer to declared states"""
        config = {
            "id": "bad",
            "initial": "a",
            "states": ["a", "b"],
            "transitions": [transition],
        }
        with pytest.raises(ConfigError, match=message):
            compile(config)

    def test_duplicate_and_reserved_state_names(self):
        """Test duplicate names and the wildcard are not valid states"""
        with pytest.raises(ConfigError, match="Duplicate state name"):
            compile({"id": "dup", "initial": "a", "states": ["a", "a"]})
        with pytest.raises(ConfigError, match="Invalid state name"):
            compile({"id": "star", "initial": "a", "states": ["a", "*"]})

    def test_unknown_hook_and_target_states(self):
        """Test entry hooks and target must refer to declared states"""
        with pytest.raises(ConfigError, match="on_entry refers to unknown state 'x'"):
            compile(
                {"id": "h", "initial": "a", "states": ["a"], "on_entry": {"x": "log"}}
            )
        with pytest.raises(ConfigError, match="Target state 'x' not found"):
            compile({"id": "t", "initial": "a", "states": ["a"], "target": "x"})

    def test_malformed_mapping(self):
        """Test wrongly typed fields are reported as ConfigError"""
        with pytest.raises(ConfigError, match="Invalid machine configuration"):
            compile({"id": "bad", "initial": "a", "states": "a"})
        with pytest.raises(ConfigError, match="Invalid machine configuration"):
            compile({"id": "bad", "initial": "a", "states": ["a"], "extra": True})


class TestResolution:
    """Test resolving action and guard names"""

    def test_unknown_action(self):
        """Test an unregistered action name fails at compile time"""
        with pytest.raises(ResolutionError, match="Unknown action 'addWater'") as exc:
            compile(glass_config())
        assert exc.value.name == "addWater"
        assert exc.value.kind == "action"

    def test_unknown_guard_name(self):
        """Test a guard that is neither registered nor a context expression"""
        config = {
            "id": "light",
            "initial": "night",
            "context": {"ambientLight": 0.1},
            "states": ["night", "day"],
            "transitions": [{"from": "night", "to": "day", "when": "daylight"}],
        }
        with pytest.raises(ResolutionError, match="Unknown guard 'daylight'"):
            compile(config)

    def test_registered_guard_wins_over_expression(self):
        """Test a registered guard is used even if the name parses as an expression"""
        table = ActionTable()
        table.register_guard(lambda c, e: c["ambientLight"] > 0.5, "daylight")
        config = {
            "id": "light",
            "initial": "night",
            "context": {"ambientLight": 0.1},
            "states": ["night", "day"],
            "transitions": [{"from": "night", "to": "day", "when": "daylight"}],
        }
        definition = compile(config, table)
        guard = definition.transitions[0].guard
        assert guard.fn is not None
        assert guard.expression == "daylight"

    def test_entry_exit_and_update_actions_resolved(self):
        """Test hook and update action names are resolved too"""
        table = ActionTable()
        for name in ("log", "greet", "bye", "brighten"):
            table.register_action(lambda c, e: None, name)
        definition = compile(
            {
                "id": "hooks",
                "initial": "a",
                "states": ["a", "b"],
                "transitions": [{"from": "a", "to": "b", "evt": "go"}],
                "on_entry": {"*": "log", "b": ["greet"]},
                "on_exit": {"a": "bye"},
                "updates": {"brighter": "brighten"},
            },
            table,
        )
        assert [a.name for a in definition.state("b").entry] == ["log", "greet"]
        assert [a.name for a in definition.state("a").entry] == ["log"]
        assert [a.name for a in definition.state("a").exit] == ["bye"]
        assert [a.name for a in definition.updates["brighter"]] == ["brighten"]
        assert definition.events == ["go", "brighter"]

        with pytest.raises(ResolutionError, match="Unknown action 'missing'"):
            compile(
                {
                    "id": "hooks",
                    "initial": "a",
                    "states": ["a"],
                    "updates": {"x": "missing"},
                }
            )
