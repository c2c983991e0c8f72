# Copyright 2026 The Kubernetes Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""
Ordered scenarios of mutating actions and named wait points.

A ``Scenario`` runs its steps one at a time. Action steps call into the
cluster; wait steps hand a fetcher and a condition to the ``Poller``. Any wait
that does not end ``Satisfied`` stops the scenario with a ``WaitFailedError``
naming the scenario, the condition and the last snapshot observed.

State that later steps depend on (which revisions were created, and for which
generation) lives in ``ScenarioState`` and is passed to every step, so
conditions are built from explicit values when their step starts.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable

from .names import ResourceNames
from .poller import ConditionDescriptor, Poller, PollOutcome
from .tracker import RevisionTracker

logger = logging.getLogger(__name__)


@dataclass
class ScenarioState:
    names: ResourceNames
    revisions: RevisionTracker = field(default_factory=RevisionTracker)
    outcomes: list[PollOutcome] = field(default_factory=list)


@dataclass(frozen=True)
class Action:
    name: str
    run: Callable[[ScenarioState], Any]


@dataclass(frozen=True)
class Wait:
    fetch: Callable[[ScenarioState], Any]
    condition: Callable[[ScenarioState], ConditionDescriptor]
    timeout: float | None = None
    allow_missing: bool = False
    hold: float = 0.0
    on_satisfied: Callable[[ScenarioState, Any], None] | None = None


class Scenario:
    """An ordered list of actions and waits that either completes or fails fast."""

    def __init__(self, name: str, poller: Poller, timeout: float):
        self.name = name
        self.poller = poller
        self.timeout = timeout
        self.steps: list[Action | Wait] = []

    def act(self, name: str, action: Callable[[ScenarioState], Any]) -> "Scenario":
        self.steps.append(Action(name, action))
        return self

    def wait(
        self,
        fetch: Callable[[ScenarioState], Any],
        condition: Callable[[ScenarioState], ConditionDescriptor],
        timeout: float | None = None,
        allow_missing: bool = False,
        hold: float = 0.0,
        on_satisfied: Callable[[ScenarioState, Any], None] | None = None,
    ) -> "Scenario":
        self.steps.append(
            Wait(fetch, condition, timeout, allow_missing, hold, on_satisfied)
        )
        return self

    def _run_wait(self, step: Wait, state: ScenarioState) -> PollOutcome:
        condition = step.condition(state)
        timeout = self.timeout if step.timeout is None else step.timeout

        def fetch():
            return step.fetch(state)

        outcome = self.poller.poll(
            fetch, condition, timeout, allow_missing=step.allow_missing
        )
        state.outcomes.append(outcome)
        outcome.raise_for_state(self.name)

        if step.on_satisfied is not None:
            step.on_satisfied(state, outcome.last_snapshot)

        if step.hold > 0:
            steady = self.poller.poll_steady(fetch, condition, step.hold)
            state.outcomes.append(steady)
            steady.raise_for_state(self.name)
        return outcome

    def run(self, state: ScenarioState) -> ScenarioState:
        logger.info(f"Running scenario {self.name} ({len(self.steps)} steps).")
        start = time.monotonic()
        for index, step in enumerate(self.steps, start=1):
            if isinstance(step, Action):
                logger.info(f"[{self.name}] step {index}: {step.name}")
                step.run(state)
            else:
                self._run_wait(step, state)
        logger.info(
            f"Scenario {self.name} completed in {time.monotonic() - start:.1f}s."
        )
        return state


def record_revision(state: ScenarioState, snapshot) -> None:
    """on_satisfied hook storing the configuration's newly created revision."""
    state.revisions.record(snapshot.latest_created_revision_name, snapshot.generation)
    state.names.revision = snapshot.latest_created_revision_name
