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
Dead-start scenarios: services whose container can never become ready.

``context`` is anything with ``create_service`` and ``update_service_image``
(normally a ``TestContext``); ``fetcher`` is anything with the
``ResourceFetcher`` read methods.
"""

from .config import E2ESettings
from .constants import DEAD_START_IMAGE, HELLO_WORLD_IMAGE
from .poller import Poller
from .predicates import (
    configuration_is_restarting,
    configuration_is_scaled_to_zero,
    configuration_updated_with_revision,
    configuration_waiting_to_become_ready,
    generation_label_selector,
    revision_is_ready,
    service_is_created,
)
from .scenario import Scenario, ScenarioState, record_revision

INITIAL_SCALE = 3
# All revisions scale to zero quickly.
REVISION_TIMEOUT_SECONDS = 5
# Long enough that the failing revision is never given up on during a run.
PROGRESS_DEADLINE = "1h"


def new_poller(settings: E2ESettings, tracer=None) -> Poller:
    return Poller(
        interval=settings.poll_interval,
        max_interval=settings.max_poll_interval,
        tracer=tracer,
    )


def _fetch_service(fetcher):
    return lambda state: fetcher.get_service(state.names.service)


def _fetch_configuration(fetcher):
    return lambda state: fetcher.get_configuration(state.names.config)


def _fetch_current_revision(fetcher):
    return lambda state: fetcher.get_revision(state.revisions.current_name)


def _fetch_pods(fetcher, pick):
    """Lists the pods of the generation of the revision ``pick`` selects."""

    def fetch(state: ScenarioState):
        generation = pick(state.revisions).generation
        return fetcher.list_pods(generation_label_selector(state.names.config, generation))

    return fetch


def _new_revision(state: ScenarioState):
    return configuration_updated_with_revision(
        state.revisions.current_name, state.revisions.names
    )


def _create(context, settings: E2ESettings, image: str):
    def create(state: ScenarioState):
        context.create_service(
            state.names,
            settings.image_path(image),
            min_scale=INITIAL_SCALE,
            revision_timeout_seconds=REVISION_TIMEOUT_SECONDS,
            progress_deadline=PROGRESS_DEADLINE,
        )

    return create


def _update(context, settings: E2ESettings, image: str):
    def update(state: ScenarioState):
        context.update_service_image(state.names, settings.image_path(image))
        state.names.image = image

    return update


def dead_start_to_healthy(
    context, fetcher, settings: E2ESettings, poller: Poller | None = None
) -> Scenario:
    """
    Creates a service that can never reach a ready state, then updates it with a
    healthy image and verifies that the healthy revision becomes ready and the
    unhealthy generation scales to zero.
    """
    scenario = Scenario(
        "DeadStartToHealthy", poller or new_poller(settings), settings.poll_timeout
    )
    return (
        scenario.act("CreateService", _create(context, settings, DEAD_START_IMAGE))
        .wait(_fetch_service(fetcher), lambda state: service_is_created(),
              allow_missing=True)
        .wait(_fetch_configuration(fetcher), _new_revision,
              allow_missing=True, on_satisfied=record_revision)
        .wait(
            _fetch_pods(fetcher, lambda revisions: revisions.first),
            lambda state: configuration_is_restarting(
                state.names.config, state.revisions.first.generation,
                min_replicas=INITIAL_SCALE, restart_threshold=0,
            ),
        )
        .act("UpdateService", _update(context, settings, HELLO_WORLD_IMAGE))
        .wait(_fetch_configuration(fetcher), _new_revision,
              on_satisfied=record_revision)
        .wait(_fetch_current_revision(fetcher), lambda state: revision_is_ready())
        .wait(
            _fetch_pods(fetcher, lambda revisions: revisions.first),
            lambda state: configuration_is_scaled_to_zero(
                state.names.config, state.revisions.first.generation
            ),
        )
    )


def dead_start_from_healthy(
    context, fetcher, settings: E2ESettings, poller: Poller | None = None
) -> Scenario:
    """
    Updates a healthy service with an image that can never reach a ready state.
    The healthy revision must remain the latest ready revision while the
    dead-start revision keeps restarting.
    """
    scenario = Scenario(
        "DeadStartFromHealthy", poller or new_poller(settings), settings.poll_timeout
    )
    return (
        scenario.act("CreateService", _create(context, settings, HELLO_WORLD_IMAGE))
        .wait(_fetch_service(fetcher), lambda state: service_is_created(),
              allow_missing=True)
        .wait(_fetch_configuration(fetcher), _new_revision,
              allow_missing=True, on_satisfied=record_revision)
        .wait(_fetch_current_revision(fetcher), lambda state: revision_is_ready())
        .act("UpdateService", _update(context, settings, DEAD_START_IMAGE))
        .wait(_fetch_configuration(fetcher), _new_revision,
              on_satisfied=record_revision)
        .wait(
            _fetch_pods(fetcher, lambda revisions: revisions.second),
            lambda state: configuration_is_restarting(
                state.names.config, state.revisions.second.generation,
                min_replicas=INITIAL_SCALE, restart_threshold=2,
            ),
        )
        .wait(
            _fetch_configuration(fetcher),
            lambda state: configuration_waiting_to_become_ready(state.revisions),
            hold=settings.steady_state_hold,
        )
    )
