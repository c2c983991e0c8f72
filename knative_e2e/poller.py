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
Generic "wait until a named condition holds" engine.

A wait is driven by three things: a zero-argument ``fetch`` callable returning
a fresh snapshot, a ``ConditionDescriptor`` naming the predicate to evaluate,
and a timeout. Every wait ends in exactly one terminal ``PollState``:

* ``SATISFIED`` - the predicate returned True.
* ``TIMED_OUT`` - the deadline passed while only transient states were seen.
* ``FATAL``     - the fetcher reported a non-retryable error, or the predicate
                  raised (for example ``ImpossibleStateError``).
"""

import enum
import logging
import time
from contextlib import nullcontext
from dataclasses import dataclass
from typing import Any, Callable

from .errors import ConditionFatalError, ConditionTimeoutError, is_fatal_error
from .snapshots import ResourceKind

logger = logging.getLogger(__name__)

Predicate = Callable[[Any], bool]


class PollState(enum.Enum):
    PENDING = "Pending"
    SATISFIED = "Satisfied"
    TIMED_OUT = "TimedOut"
    FATAL = "Fatal"

    @property
    def is_terminal(self) -> bool:
        return self is not PollState.PENDING


@dataclass(frozen=True)
class ConditionDescriptor:
    """A named predicate over snapshots of one resource kind."""

    name: str
    kind: ResourceKind
    predicate: Predicate

    def evaluate(self, snapshot) -> bool:
        snapshot_kind = getattr(snapshot, "kind", None)
        if snapshot_kind is not self.kind:
            raise TypeError(
                f"{self.name} expects a {self.kind.value} snapshot, "
                f"got {type(snapshot).__name__}"
            )
        return bool(self.predicate(snapshot))


@dataclass(frozen=True)
class PollOutcome:
    """Terminal result of one wait point."""

    state: PollState
    condition: str
    elapsed: float
    attempts: int
    last_snapshot: Any = None
    last_error: BaseException | None = None

    @property
    def satisfied(self) -> bool:
        return self.state is PollState.SATISFIED

    def describe(self) -> str:
        lines = [
            f"{self.condition}: {self.state.value} after {self.elapsed:.1f}s "
            f"({self.attempts} attempts)"
        ]
        if self.last_error is not None:
            lines.append(
                f"  last error: {type(self.last_error).__name__}: {self.last_error}"
            )
        if self.last_snapshot is None:
            lines.append("  last snapshot: <none observed>")
        elif hasattr(self.last_snapshot, "describe"):
            lines.append("  last snapshot:")
            for key, value in self.last_snapshot.describe().items():
                lines.append(f"    {key}: {value}")
        else:
            lines.append(f"  last snapshot: {self.last_snapshot!r}")
        return "\n".join(lines)

    def raise_for_state(self, scenario: str | None = None):
        """Raises ConditionTimeoutError or ConditionFatalError unless satisfied."""
        if self.state is PollState.SATISFIED:
            return
        prefix = f"[{scenario}] " if scenario else ""
        message = prefix + self.describe()
        if self.state is PollState.TIMED_OUT:
            raise ConditionTimeoutError(message, outcome=self, scenario=scenario)
        raise ConditionFatalError(
            message, outcome=self, scenario=scenario
        ) from self.last_error


class Poller:
    """
    Repeatedly fetches a resource and evaluates a condition over it.

    The interval grows by ``backoff_factor`` after every unsatisfied tick and is
    capped at ``max_interval``. Sleeps are clipped to the remaining budget so a
    wait never overshoots its deadline by more than one fetch round-trip.
    """

    def __init__(
        self,
        interval: float = 1.0,
        max_interval: float = 10.0,
        backoff_factor: float = 1.5,
        tracer=None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if interval <= 0:
            raise ValueError("interval must be positive")
        if backoff_factor < 1:
            raise ValueError("backoff_factor must be at least 1")
        self.interval = interval
        self.max_interval = max(interval, max_interval)
        self.backoff_factor = backoff_factor
        self.tracer = tracer
        self.clock = clock
        self.sleep = sleep

    def _span(self, condition: ConditionDescriptor):
        if not self.tracer:
            return nullcontext()
        return self.tracer.start_as_current_span(f"wait.{condition.name}")

    def _finish(self, span, outcome: PollOutcome) -> PollOutcome:
        if span:
            span.set_attribute("wait.state", outcome.state.value)
            span.set_attribute("wait.attempts", outcome.attempts)
            span.set_attribute("wait.elapsed_seconds", outcome.elapsed)
        if outcome.state is PollState.SATISFIED:
            logger.info(
                f"{outcome.condition} satisfied after {outcome.elapsed:.1f}s "
                f"({outcome.attempts} attempts)."
            )
        else:
            logger.error(f"Wait failed:\n{outcome.describe()}")
        return outcome

    def poll(
        self,
        fetch: Callable[[], Any],
        condition: ConditionDescriptor,
        timeout: float,
        allow_missing: bool = False,
    ) -> PollOutcome:
        """Polls until ``condition`` holds, the deadline passes or a fatal error occurs."""
        with self._span(condition) as span:
            if span:
                span.set_attribute("wait.condition", condition.name)
                span.set_attribute("wait.kind", condition.kind.value)
                span.set_attribute("wait.timeout_seconds", timeout)

            logger.info(f"Waiting for {condition.name} (timeout {timeout}s)...")
            start = self.clock()
            deadline = start + timeout
            interval = self.interval
            attempts = 0
            last_snapshot = None
            last_error = None
            state = PollState.PENDING

            while not state.is_terminal:
                attempts += 1
                try:
                    snapshot = fetch()
                except Exception as e:
                    if self.clock() > deadline:
                        # Result of a fetch that outlived the deadline.
                        state = PollState.TIMED_OUT
                        continue
                    if is_fatal_error(e, allow_missing=allow_missing):
                        last_error = e
                        state = PollState.FATAL
                        continue
                    logger.warning(
                        f"{condition.name}: transient fetch error "
                        f"(attempt {attempts}): {e}"
                    )
                    last_error = e
                else:
                    if self.clock() > deadline:
                        state = PollState.TIMED_OUT
                        continue
                    last_snapshot = snapshot
                    last_error = None
                    try:
                        if condition.evaluate(snapshot):
                            state = PollState.SATISFIED
                            continue
                    except Exception as e:
                        last_error = e
                        state = PollState.FATAL
                        continue
                    logger.debug(
                        f"{condition.name} not yet satisfied (attempt {attempts}): "
                        f"{snapshot.describe()}"
                    )

                remaining = deadline - self.clock()
                if remaining <= 0:
                    state = PollState.TIMED_OUT
                    continue
                self.sleep(min(interval, remaining))
                interval = min(interval * self.backoff_factor, self.max_interval)
                if self.clock() >= deadline:
                    state = PollState.TIMED_OUT

            outcome = PollOutcome(
                state=state,
                condition=condition.name,
                elapsed=self.clock() - start,
                attempts=attempts,
                last_snapshot=last_snapshot,
                last_error=last_error,
            )
            return self._finish(span, outcome)

    def poll_steady(
        self,
        fetch: Callable[[], Any],
        condition: ConditionDescriptor,
        duration: float,
    ) -> PollOutcome:
        """Verifies that ``condition`` keeps holding for ``duration`` seconds.

        A reconciled snapshot that evaluates False, or a predicate that raises,
        ends the wait as FATAL; reaching the end of the window is SATISFIED.
        Snapshots the reconciler has not caught up with yet are skipped, as are
        transient fetch errors. Fatal fetch errors abort.
        """
        with self._span(condition) as span:
            if span:
                span.set_attribute("wait.condition", condition.name)
                span.set_attribute("wait.kind", condition.kind.value)
                span.set_attribute("wait.hold_seconds", duration)

            logger.info(f"Verifying {condition.name} holds for {duration}s...")
            start = self.clock()
            deadline = start + duration
            attempts = 0
            last_snapshot = None
            last_error = None
            state = PollState.PENDING

            while not state.is_terminal:
                attempts += 1
                try:
                    snapshot = fetch()
                except Exception as e:
                    last_error = e
                    if is_fatal_error(e):
                        state = PollState.FATAL
                        continue
                    logger.warning(f"{condition.name}: transient fetch error: {e}")
                else:
                    last_snapshot = snapshot
                    last_error = None
                    try:
                        holds = condition.evaluate(snapshot)
                    except Exception as e:
                        last_error = e
                        state = PollState.FATAL
                        continue
                    if not holds:
                        # Pod sets carry no generation and are always current.
                        if getattr(snapshot, "is_reconciled", True):
                            state = PollState.FATAL
                            continue
                        logger.debug(
                            f"{condition.name}: skipping unreconciled snapshot "
                            f"(attempt {attempts}): {snapshot.describe()}"
                        )

                remaining = deadline - self.clock()
                if remaining <= 0:
                    state = PollState.SATISFIED
                    continue
                self.sleep(min(self.interval, remaining))

            outcome = PollOutcome(
                state=state,
                condition=condition.name,
                elapsed=self.clock() - start,
                attempts=attempts,
                last_snapshot=last_snapshot,
                last_error=last_error,
            )
            return self._finish(span, outcome)
