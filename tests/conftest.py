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

import pytest
from kubernetes.client.rest import ApiException

from knative_e2e.config import E2ESettings
from knative_e2e.constants import (
    CONFIGURATION_GENERATION_LABEL_KEY,
    CONFIGURATION_LABEL_KEY,
    DEAD_START_IMAGE,
    NOT_PENDING_FIELD_SELECTOR,
)
from knative_e2e.poller import Poller
from knative_e2e.snapshots import (
    ConfigurationSnapshot,
    PodSetSnapshot,
    PodStatus,
    RevisionSnapshot,
    ServiceSnapshot,
)


class FakeClock:
    """Monotonic clock that only moves when something sleeps or advances it."""

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float):
        self.sleeps.append(seconds)
        self.now += seconds

    def advance(self, seconds: float):
        self.now += seconds


class FakeControlPlane:
    """
    A scripted stand-in for Knative Serving. Every read advances reconciliation
    by one step, so scenarios converge after a bounded number of polls.

    ``stalled`` never reconciles anything; ``promote_failing`` marks dead-start
    revisions Ready, which a correct control plane never does.
    """

    def __init__(self, stalled: bool = False, promote_failing: bool = False):
        self.stalled = stalled
        self.promote_failing = promote_failing
        self.service = None
        self.generation = 0
        self.observed_generation = 0
        self.images = {}
        self.min_scale = 1
        self.revisions = {}
        self.latest_created = None
        self.latest_ready = None
        self.pods = []
        self.reads = 0
        self.mutations = []

    # Mutating actions, same signatures as TestContext.
    def create_service(self, names, image, min_scale=None,
                       revision_timeout_seconds=None, progress_deadline=None):
        self.mutations.append(("create", image))
        self.service = names.service
        self.min_scale = min_scale or 1
        self.generation = 1
        self.images[1] = image

    def update_service_image(self, names, image):
        self.mutations.append(("update", image))
        self.generation += 1
        self.images[self.generation] = image

    # Reconciliation.
    def _revision_name(self, generation: int) -> str:
        return f"{self.service}-{generation:05d}"

    def _is_dead_start(self, generation: int) -> bool:
        return DEAD_START_IMAGE in self.images[generation]

    def _tick(self):
        self.reads += 1
        if self.stalled or self.service is None:
            return

        if self.observed_generation < self.generation:
            self.observed_generation = self.generation
            name = self._revision_name(self.generation)
            self.revisions[name] = {"generation": self.generation, "ready": False}
            self.latest_created = name
            for i in range(self.min_scale):
                self.pods.append({
                    "name": f"{name}-pod-{i}",
                    "generation": self.generation,
                    "phase": "Pending",
                    "restarts": 0,
                })
            return

        for pod in self.pods:
            if pod["phase"] == "Pending":
                pod["phase"] = "Running"
            elif self._is_dead_start(pod["generation"]):
                pod["restarts"] += 1

        for name, revision in self.revisions.items():
            generation = revision["generation"]
            running = [p for p in self.pods
                       if p["generation"] == generation and p["phase"] == "Running"]
            healthy = not self._is_dead_start(generation) or self.promote_failing
            if running and healthy and not revision["ready"]:
                revision["ready"] = True
                self.latest_ready = name

        # Older generations scale to zero once a newer revision is ready.
        if self.latest_ready:
            ready_generation = self.revisions[self.latest_ready]["generation"]
            self.pods = [p for p in self.pods if p["generation"] >= ready_generation]

    def _not_found(self, name: str):
        return ApiException(status=404, reason=f"{name} not found")

    # Reads, same signatures as ResourceFetcher.
    def get_service(self, name):
        self._tick()
        if name != self.service:
            raise self._not_found(name)
        return ServiceSnapshot.from_object({
            "metadata": {"name": name, "generation": self.generation},
            "status": {
                "observedGeneration": self.observed_generation,
                "latestCreatedRevisionName": self.latest_created,
                "latestReadyRevisionName": self.latest_ready,
            },
        })

    def get_configuration(self, name):
        self._tick()
        if name != self.service or self.latest_created is None:
            raise self._not_found(name)
        return ConfigurationSnapshot.from_object({
            "metadata": {"name": name, "generation": self.generation},
            "status": {
                "observedGeneration": self.observed_generation,
                "latestCreatedRevisionName": self.latest_created,
                "latestReadyRevisionName": self.latest_ready,
            },
        })

    def get_revision(self, name):
        self._tick()
        if name not in self.revisions:
            raise self._not_found(name)
        revision = self.revisions[name]
        return RevisionSnapshot.from_object({
            "metadata": {
                "name": name,
                "generation": 1,
                "labels": {
                    CONFIGURATION_GENERATION_LABEL_KEY: str(revision["generation"]),
                },
            },
            "status": {
                "observedGeneration": 1,
                "conditions": [{
                    "type": "Ready",
                    "status": "True" if revision["ready"] else "Unknown",
                }],
            },
        })

    def list_pods(self, label_selector, field_selector=NOT_PENDING_FIELD_SELECTOR):
        self._tick()
        wanted = dict(pair.split("=", 1) for pair in label_selector.split(","))
        pods = []
        for pod in self.pods:
            labels = {
                CONFIGURATION_LABEL_KEY: self.service,
                CONFIGURATION_GENERATION_LABEL_KEY: str(pod["generation"]),
            }
            if any(labels.get(k) != v for k, v in wanted.items()):
                continue
            if field_selector == NOT_PENDING_FIELD_SELECTOR and pod["phase"] == "Pending":
                continue
            pods.append(PodStatus(
                name=pod["name"],
                phase=pod["phase"],
                labels=labels,
                restart_counts=(pod["restarts"],),
            ))
        return PodSetSnapshot(label_selector, field_selector, tuple(pods))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def poller(clock):
    return Poller(interval=1.0, max_interval=4.0, backoff_factor=2.0,
                  clock=clock, sleep=clock.sleep)


@pytest.fixture
def settings():
    return E2ESettings(
        docker_repo="registry.example.com/serving",
        poll_interval=1.0,
        max_poll_interval=4.0,
        poll_timeout=60.0,
    )


@pytest.fixture
def control_plane():
    return FakeControlPlane()


@pytest.fixture
def make_control_plane():
    return FakeControlPlane
