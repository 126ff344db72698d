"""--skip-if-env / --resume-if-env checks, run before anything is spawned."""

import os
from dataclasses import dataclass
from typing import Callable

EnvLookup = Callable[[str], "str | None"]


@dataclass(frozen=True)
class GateConfig:
    skip_if_env: str | None = None
    resume_if_env: str | None = None


@dataclass(frozen=True)
class Decision:
    proceed: bool
    reasons: tuple[str, ...]


def evaluate(gate: GateConfig, lookup: EnvLookup = os.environ.get) -> Decision:
    """Skip check first, then resume check. Only presence matters, not the value."""
    reasons = []

    if gate.skip_if_env is None:
        reasons.append("*skip_if_env* not present, resuming execution")
    elif lookup(gate.skip_if_env) is not None:
        reasons.append("*skip_if_env* present, ending execution")
        return Decision(proceed=False, reasons=tuple(reasons))
    else:
        reasons.append("*skip_if_env* not set, resuming execution")

    if gate.resume_if_env is None:
        reasons.append("*resume_if_env* not present, resuming execution")
    elif lookup(gate.resume_if_env) is None:
        reasons.append("*resume_if_env* not set, ending execution")
        return Decision(proceed=False, reasons=tuple(reasons))
    else:
        reasons.append("*resume_if_env* present, resuming execution")

    return Decision(proceed=True, reasons=tuple(reasons))
