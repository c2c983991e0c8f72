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
Immutable views of a resource's reported state at one poll tick.
"""

import enum
from dataclasses import dataclass, field
from typing import Any

from .constants import (
    CONDITION_READY,
    CONFIGURATION_GENERATION_LABEL_KEY,
    POD_PHASE_PENDING,
    STATUS_TRUE,
)

StrDict = dict[str, Any]


class ResourceKind(enum.Enum):
    SERVICE = "Service"
    CONFIGURATION = "Configuration"
    REVISION = "Revision"
    POD_SET = "PodSet"


@dataclass(frozen=True)
class Condition:
    """A typed status entry reported by the control plane."""

    type: str
    status: str
    reason: str | None = None
    message: str | None = None

    @classmethod
    def from_dict(cls, obj: StrDict) -> "Condition":
        return cls(
            type=obj.get("type", ""),
            status=obj.get("status", "Unknown"),
            reason=obj.get("reason"),
            message=obj.get("message"),
        )


@dataclass(frozen=True)
class ResourceSnapshot:
    """Fields shared by every Knative resource snapshot."""

    kind = None

    name: str
    generation: int = 0
    observed_generation: int = 0
    conditions: tuple[Condition, ...] = ()

    @property
    def is_reconciled(self) -> bool:
        """True once the reconciler has observed the latest spec."""
        return self.observed_generation == self.generation

    def get_condition(self, condition_type: str) -> Condition | None:
        for cond in self.conditions:
            if cond.type == condition_type:
                return cond
        return None

    @property
    def is_ready(self) -> bool:
        cond = self.get_condition(CONDITION_READY)
        return cond is not None and cond.status == STATUS_TRUE

    def describe(self) -> StrDict:
        ready = self.get_condition(CONDITION_READY)
        described = {
            "kind": self.kind.value,
            "name": self.name,
            "generation": self.generation,
            "observedGeneration": self.observed_generation,
        }
        if ready is not None:
            described["ready"] = ready.status
            if ready.reason:
                described["readyReason"] = ready.reason
            if ready.message:
                described["readyMessage"] = ready.message
        return described

    @staticmethod
    def _common_fields(obj: StrDict) -> StrDict:
        metadata = obj.get("metadata", {}) or {}
        status = obj.get("status", {}) or {}
        return {
            "name": metadata.get("name", ""),
            "generation": metadata.get("generation", 0) or 0,
            "observed_generation": status.get("observedGeneration", 0) or 0,
            "conditions": tuple(
                Condition.from_dict(c) for c in status.get("conditions", []) or []
            ),
        }


@dataclass(frozen=True)
class ServiceSnapshot(ResourceSnapshot):
    kind = ResourceKind.SERVICE

    latest_created_revision_name: str | None = None
    latest_ready_revision_name: str | None = None
    url: str | None = None

    @classmethod
    def from_object(cls, obj: StrDict) -> "ServiceSnapshot":
        status = obj.get("status", {}) or {}
        return cls(
            latest_created_revision_name=status.get("latestCreatedRevisionName"),
            latest_ready_revision_name=status.get("latestReadyRevisionName"),
            url=status.get("url"),
            **cls._common_fields(obj),
        )

    def describe(self) -> StrDict:
        described = super().describe()
        described["latestCreatedRevisionName"] = self.latest_created_revision_name
        described["latestReadyRevisionName"] = self.latest_ready_revision_name
        return described


@dataclass(frozen=True)
class ConfigurationSnapshot(ResourceSnapshot):
    kind = ResourceKind.CONFIGURATION

    latest_created_revision_name: str | None = None
    latest_ready_revision_name: str | None = None

    @classmethod
    def from_object(cls, obj: StrDict) -> "ConfigurationSnapshot":
        status = obj.get("status", {}) or {}
        return cls(
            latest_created_revision_name=status.get("latestCreatedRevisionName"),
            latest_ready_revision_name=status.get("latestReadyRevisionName"),
            **cls._common_fields(obj),
        )

    def describe(self) -> StrDict:
        described = super().describe()
        described["latestCreatedRevisionName"] = self.latest_created_revision_name
        described["latestReadyRevisionName"] = self.latest_ready_revision_name
        return described


@dataclass(frozen=True)
class RevisionSnapshot(ResourceSnapshot):
    kind = ResourceKind.REVISION

    configuration_generation: int | None = None

    @classmethod
    def from_object(cls, obj: StrDict) -> "RevisionSnapshot":
        labels = (obj.get("metadata", {}) or {}).get("labels", {}) or {}
        generation = labels.get(CONFIGURATION_GENERATION_LABEL_KEY)
        return cls(
            configuration_generation=int(generation) if generation else None,
            **cls._common_fields(obj),
        )


@dataclass(frozen=True)
class PodStatus:
    """The slice of a Pod that restart and scale waits look at."""

    name: str
    phase: str | None = None
    labels: StrDict = field(default_factory=dict, hash=False, compare=False)
    restart_counts: tuple[int, ...] = ()

    @property
    def is_pending(self) -> bool:
        # Pods without a reported phase have not been scheduled yet either.
        return self.phase in (None, POD_PHASE_PENDING)

    @property
    def max_restart_count(self) -> int:
        return max(self.restart_counts, default=0)

    @classmethod
    def from_pod(cls, pod) -> "PodStatus":
        """Builds a PodStatus from a kubernetes.client.V1Pod."""
        status = pod.status
        container_statuses = (status.container_statuses or []) if status else []
        return cls(
            name=pod.metadata.name,
            phase=status.phase if status else None,
            labels=dict(pod.metadata.labels or {}),
            restart_counts=tuple(cs.restart_count or 0 for cs in container_statuses),
        )


@dataclass(frozen=True)
class PodSetSnapshot:
    """The pods matched by one label/field selector pair at one tick."""

    kind = ResourceKind.POD_SET

    label_selector: str
    field_selector: str | None = None
    pods: tuple[PodStatus, ...] = ()

    @property
    def name(self) -> str:
        return self.label_selector

    def describe(self) -> StrDict:
        return {
            "kind": self.kind.value,
            "labelSelector": self.label_selector,
            "fieldSelector": self.field_selector,
            "pods": {
                pod.name: {"phase": pod.phase, "restarts": list(pod.restart_counts)}
                for pod in self.pods
            },
        }
