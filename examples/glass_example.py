"""Example filling a glass of water until it is full."""

from fizbin import ActionTable, ManualTimerService, compile, instantiate, render
from fizbin.visualization import GraphvizBackend, MermaidBackend

table = ActionTable()


@table.action(name="addWater")
def add_water(context, event):
    """Pour one unit of water into the glass."""
    return {"amount": context["amount"] + 1}


@table.guard(name="glassIsFull")
def glass_is_full(context, event):
    return context["amount"] >= 10


GLASS = {
    "id": "glass",
    "initial": "empty",
    "context": {"amount": 0},
    "states": ["empty", "filling", "full"],
    "transitions": [
        {"from": "empty", "to": "filling", "evt": "FILL", "actions": "addWater"},
        # Transient transition, checked whenever filling is entered
        {"from": "filling", "to": "full", "when": "glassIsFull"},
        {"from": "filling", "to": "filling", "evt": "FILL", "actions": "addWater"},
    ],
}


def main():
    definition = compile(GLASS, table)
    glass = instantiate(definition, timers=ManualTimerService())

    while not glass.in_terminal_state:
        glass.send("FILL")
        print(f"{glass.state:8} amount={glass.context['amount']}")

    print("\nIgnored once full:", not glass.send("FILL"))

    print("\nDOT:")
    print(GraphvizBackend().render_graph(render(definition, glass.state)))
    print("Mermaid:")
    print(MermaidBackend().visualize(definition))


if __name__ == "__main__":
    main()
