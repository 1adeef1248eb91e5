import logging
from pathlib import Path

import yaml
from transitions import Machine


class StitchFSM:
    """
    Finite State Machine tracking a single stitch call.
    Loads its structure from states.yaml for easy modification.
    """

    TERMINAL_STATES = ("done", "failed")

    def __init__(self, config_path=None, callbacks=None):
        """
        :param config_path: Optional path to the YAML FSM definition.
        :param callbacks: Optional dict of callbacks for state entry actions.
                          Example: {"on_enter_compositing": some_function}
        """
        self.log = logging.getLogger("StitchFSM")
        self.config_path = config_path or Path(__file__).parent / "states.yaml"
        self.callbacks = callbacks or {}

        with open(self.config_path, "r") as f:
            fsm_config = yaml.safe_load(f)

        state_names = fsm_config.get("states", [])
        transitions = fsm_config.get("transitions", [])
        initial = fsm_config.get("initial", "idle")

        # Validate callbacks before wiring them into the states
        for name, func in self.callbacks.items():
            if not callable(func):
                raise ValueError(f"Callback '{name}' must be callable, got {type(func)}")
            if not name.startswith("on_"):
                raise ValueError(f"Callback name '{name}' should start with 'on_' (e.g., 'on_enter_compositing')")

        states = []
        for state in state_names:
            entry = {"name": state}
            for hook in ("enter", "exit"):
                func = self.callbacks.get(f"on_{hook}_{state}")
                if func is not None:
                    entry[f"on_{hook}"] = [func]
            states.append(entry)

        self.machine = Machine(
            model=self,
            states=states,
            transitions=transitions,
            initial=initial,
            auto_transitions=False,
            after_state_change="_log_state",
        )

    def _log_state(self):
        self.log.debug(f"Stitch state -> {self.state}")

    def is_terminal(self) -> bool:
        return self.state in self.TERMINAL_STATES
