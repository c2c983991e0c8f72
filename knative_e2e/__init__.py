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

from .config import E2ESettings
from .errors import (
    ConditionFatalError,
    ConditionTimeoutError,
    FatalFetchError,
    ImpossibleStateError,
    WaitFailedError,
)
from .fetcher import ResourceFetcher
from .names import ResourceNames, object_name_for_test
from .poller import ConditionDescriptor, Poller, PollOutcome, PollState
from .scenario import Scenario, ScenarioState
from .snapshots import ResourceKind
from .tracker import RevisionRecord, RevisionTracker

__all__ = [
    "ConditionDescriptor",
    "ConditionFatalError",
    "ConditionTimeoutError",
    "E2ESettings",
    "FatalFetchError",
    "ImpossibleStateError",
    "PollOutcome",
    "PollState",
    "Poller",
    "ResourceFetcher",
    "ResourceKind",
    "ResourceNames",
    "RevisionRecord",
    "RevisionTracker",
    "Scenario",
    "ScenarioState",
    "WaitFailedError",
    "object_name_for_test",
]
