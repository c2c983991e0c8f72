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
Named conditions encoding the Knative Serving resource lifecycle.

Each factory returns a ConditionDescriptor. Predicates return False while the
control plane is still catching up (including observedGeneration lag) and raise
ImpossibleStateError only for states the lifecycle can never leave.
"""

from typing import Iterable

from .constants import (
    CONDITION_READY,
    CONFIGURATION_GENERATION_LABEL_KEY,
    CONFIGURATION_IS_RESTARTING,
    CONFIGURATION_IS_SCALED_TO_ZERO,
    CONFIGURATION_LABEL_KEY,
    CONFIGURATION_UPDATED_WITH_REVISION,
    CONFIGURATION_WAITING_TO_BECOME_READY,
    REVISION_IS_READY,
    SERVICE_IS_CREATED,
    STATUS_FALSE,
    TERMINAL_REVISION_REASONS,
)
from .errors import ImpossibleStateError
from .poller import ConditionDescriptor
from .snapshots import (
    ConfigurationSnapshot,
    PodSetSnapshot,
    PodStatus,
    ResourceKind,
    RevisionSnapshot,
    ServiceSnapshot,
)
from .tracker import RevisionTracker


def generation_label_selector(config: str, generation: int) -> str:
    """Selects the pods of one generation of a configuration."""
    return (
        f"{CONFIGURATION_LABEL_KEY}={config},"
        f"{CONFIGURATION_GENERATION_LABEL_KEY}={generation}"
    )


def scheduled_pods(
    snapshot: PodSetSnapshot, config: str, generation: int
) -> list[PodStatus]:
    """Non-pending pods that belong to the given configuration generation.

    Pods of any other generation are dropped even if the fetcher returned them.
    """
    return [
        pod
        for pod in snapshot.pods
        if not pod.is_pending
        and pod.labels.get(CONFIGURATION_LABEL_KEY) == config
        and pod.labels.get(CONFIGURATION_GENERATION_LABEL_KEY) == str(generation)
    ]


def service_is_created() -> ConditionDescriptor:
    """The service controller has observed the latest spec."""

    def check(obj: ServiceSnapshot) -> bool:
        return obj.observed_generation == obj.generation

    return ConditionDescriptor(SERVICE_IS_CREATED, ResourceKind.SERVICE, check)


def configuration_updated_with_revision(
    previous: str | None, seen: Iterable[str] = ()
) -> ConditionDescriptor:
    """The configuration has created a revision other than ``previous``.

    ``seen`` lists revisions recorded earlier in the scenario; the configuration
    pointing back at one of them (other than ``previous``) is a regression.
    """
    older = frozenset(seen) - {previous}

    def check(obj: ConfigurationSnapshot) -> bool:
        created = obj.latest_created_revision_name
        if created in older:
            raise ImpossibleStateError(
                f"Configuration {obj.name} regressed to older revision {created}."
            )
        if not obj.is_reconciled or not created:
            return False
        return created != previous

    return ConditionDescriptor(
        CONFIGURATION_UPDATED_WITH_REVISION, ResourceKind.CONFIGURATION, check
    )


def revision_is_ready() -> ConditionDescriptor:
    """The revision reports Ready=True for its current generation."""

    def check(obj: RevisionSnapshot) -> bool:
        if not obj.is_reconciled:
            return False
        if obj.is_ready:
            return True
        ready = obj.get_condition(CONDITION_READY)
        if (
            ready is not None
            and ready.status == STATUS_FALSE
            and ready.reason in TERMINAL_REVISION_REASONS
        ):
            raise ImpossibleStateError(
                f"Revision {obj.name} failed permanently: "
                f"{ready.reason}: {ready.message or ''}"
            )
        return False

    return ConditionDescriptor(REVISION_IS_READY, ResourceKind.REVISION, check)


def configuration_is_restarting(
    config: str, generation: int, min_replicas: int, restart_threshold: int = 0
) -> ConditionDescriptor:
    """
    At least ``min_replicas`` scheduled pods of the generation exist and some
    container has restarted more than ``restart_threshold`` times.
    """

    def check(obj: PodSetSnapshot) -> bool:
        pods = scheduled_pods(obj, config, generation)
        if len(pods) < min_replicas:
            return False
        return any(pod.max_restart_count > restart_threshold for pod in pods)

    return ConditionDescriptor(
        CONFIGURATION_IS_RESTARTING, ResourceKind.POD_SET, check
    )


def configuration_is_scaled_to_zero(config: str, generation: int) -> ConditionDescriptor:
    def check(obj: PodSetSnapshot) -> bool:
        return not scheduled_pods(obj, config, generation)

    return ConditionDescriptor(
        CONFIGURATION_IS_SCALED_TO_ZERO, ResourceKind.POD_SET, check
    )


def configuration_waiting_to_become_ready(
    revisions: RevisionTracker,
) -> ConditionDescriptor:
    """
    The first revision keeps serving while the second one is still not ready.

    Promotion of the second revision to latest-ready, or the configuration
    moving to a revision that is neither, can never turn back into this state.
    """
    if revisions.first is None or revisions.second is None:
        raise ValueError(
            "configuration_waiting_to_become_ready needs two recorded revisions."
        )
    first = revisions.first.name
    second = revisions.second.name

    def check(obj: ConfigurationSnapshot) -> bool:
        ready = obj.latest_ready_revision_name
        created = obj.latest_created_revision_name
        if ready == second:
            raise ImpossibleStateError(
                f"Revision {second} became ready while {first} was expected to keep serving."
            )
        if not obj.is_reconciled:
            return False
        if created not in (first, second):
            raise ImpossibleStateError(
                f"Configuration {obj.name} moved to unexpected revision {created}."
            )
        return ready == first and created == second

    return ConditionDescriptor(
        CONFIGURATION_WAITING_TO_BECOME_READY, ResourceKind.CONFIGURATION, check
    )
