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

import os
from typing import Optional

import pytest

from knative_e2e import scenarios
from knative_e2e.config import E2ESettings
from knative_e2e.constants import DEAD_START_IMAGE, HELLO_WORLD_IMAGE
from knative_e2e.context import TestContext
from knative_e2e.names import ResourceNames, object_name_for_test
from knative_e2e.scenario import ScenarioState
from knative_e2e.tracing import get_tracer

REQUIRED_ENV = "KNATIVE_E2E"


def _should_skip() -> Optional[str]:
    if os.environ.get(REQUIRED_ENV, "0") != "1":
        return f"Set {REQUIRED_ENV}=1 to run against a Knative Serving cluster"
    return None


pytestmark = [
    pytest.mark.e2e,
    pytest.mark.skipif(_should_skip() is not None, reason=_should_skip() or ""),
]


@pytest.fixture(scope="module")
def settings():
    return E2ESettings.from_env()


@pytest.fixture(scope="module")
def tc(settings):
    """Provides the required kubernetes api for E2E tests"""
    context = TestContext(settings)
    yield context


@pytest.fixture(scope="function")
def scenario_namespace(tc, settings):
    """Runs each test in its own namespace when E2E_TEMP_NAMESPACE is set"""
    if not settings.temp_namespace:
        yield tc.namespace
        return
    namespace = tc.create_temp_namespace(prefix="dead-start")
    yield namespace
    tc.delete_namespace(namespace)


def _names(request, image: str) -> ResourceNames:
    return ResourceNames.for_service(object_name_for_test(request.node.name), image)


@pytest.fixture(scope="function")
def dead_start_names(tc, scenario_namespace, request):
    """Unique names for a scenario run, with the Service torn down afterwards"""
    names = _names(request, DEAD_START_IMAGE)
    yield names
    tc.delete_service(names)


@pytest.fixture(scope="function")
def hello_world_names(tc, scenario_namespace, request):
    names = _names(request, HELLO_WORLD_IMAGE)
    yield names
    tc.delete_service(names)


def test_dead_start_to_healthy(tc, settings, dead_start_names):
    poller = scenarios.new_poller(settings, tracer=get_tracer(settings))
    scenario = scenarios.dead_start_to_healthy(tc, tc.fetcher(), settings, poller=poller)

    state = scenario.run(ScenarioState(dead_start_names))

    assert len(state.revisions.history) == 2
    assert all(outcome.satisfied for outcome in state.outcomes)


def test_dead_start_from_healthy(tc, settings, hello_world_names):
    poller = scenarios.new_poller(settings, tracer=get_tracer(settings))
    scenario = scenarios.dead_start_from_healthy(tc, tc.fetcher(), settings, poller=poller)

    state = scenario.run(ScenarioState(hello_world_names))

    final = state.outcomes[-1].last_snapshot
    assert final.latest_ready_revision_name == state.revisions.first.name
    assert final.latest_created_revision_name == state.revisions.second.name
