"""Example of a motion-activated security light loaded from YAML."""

import os
import tempfile

from fizbin import Machine

CONFIG = """
id: seclight
description: Motion-activated security light
initial: Night
context:
  ambientLight: 0.1
states: [Day, Night, 'On']
transitions:
  - {from: Day, to: Night, when: ambientLight < 0.5}
  - {from: [Night, 'On'], to: Day, when: ambientLight > 0.5}
  - {from: [Night, 'On'], to: 'On', evt: motion}
  - {from: 'On', to: Night, timer: 5000}
updates:
  light: setAmbientLight
on_entry:
  'On': switchOn
on_exit:
  'On': switchOff
"""


def load_machine(path: str) -> Machine:
    machine = Machine.load(path)

    @machine.action(name="setAmbientLight")
    def set_ambient_light(context, event):
        return {"ambientLight": event.payload}

    @machine.action(name="switchOn")
    def switch_on(context, event):
        print("  * lamp on")

    @machine.action(name="switchOff")
    def switch_off(context, event):
        print("  * lamp off")

    return machine


def main():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = os.path.join(tmpdir, "security-light.yaml")
        with open(path, "w") as f:
            f.write(CONFIG)
        machine = load_machine(path)

    errors = machine.validate()
    if errors:
        raise SystemExit(f"Invalid machine: {errors}")

    # Events and clock advances in milliseconds
    script = ["motion", 3000, "motion", 5000, "motion"]
    light = machine.run(script)
    print("After script:", light.state, light.history)

    light.send("light", payload=0.9)
    print("At dawn:", light.state)
    light.send("light", payload=0.2)
    print("At dusk:", light.state)

    print()
    print(machine.to_plantuml(instance=light))


if __name__ == "__main__":
    main()
