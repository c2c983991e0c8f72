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
Error taxonomy for wait points: transient, fatal and timeout.
"""

from kubernetes.client.rest import ApiException

# Status codes that will not change by asking again.
FATAL_API_STATUSES = frozenset({400, 401, 403, 404, 405, 410, 422})

# Errors that point at a bug in the caller rather than at the cluster.
_PROGRAMMING_ERRORS = (TypeError, ValueError, KeyError, AttributeError)


class ImpossibleStateError(Exception):
    """Raised by a predicate when the observed state can never become satisfied."""


class FatalFetchError(Exception):
    """Raised by a fetcher for failures that retrying cannot fix."""


class WaitFailedError(Exception):
    """A wait point ended without being satisfied."""

    def __init__(self, message: str, outcome=None, scenario: str | None = None):
        super().__init__(message)
        self.outcome = outcome
        self.scenario = scenario

    @property
    def condition(self) -> str | None:
        return self.outcome.condition if self.outcome else None

    @property
    def last_snapshot(self):
        return self.outcome.last_snapshot if self.outcome else None


class ConditionTimeoutError(WaitFailedError, TimeoutError):
    """The deadline passed while only transient states were observed."""


class ConditionFatalError(WaitFailedError):
    """The wait was aborted early on a non-retryable error."""


def is_fatal_error(exc: BaseException, allow_missing: bool = False) -> bool:
    """Classifies a fetch error as fatal (abort the wait) or transient (retry).

    Not-found responses are fatal unless the caller declared that the resource
    may not exist yet.
    """
    if isinstance(exc, FatalFetchError):
        return True
    if isinstance(exc, ApiException):
        if exc.status == 404 and allow_missing:
            return False
        return exc.status in FATAL_API_STATUSES
    return isinstance(exc, _PROGRAMMING_ERRORS)
