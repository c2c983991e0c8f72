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
Settings for E2E runs, read from the environment.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_KUBECONFIG_PATH = os.path.join("~", ".kube", "config")
DEFAULT_NAMESPACE = "serving-tests"
DEFAULT_DOCKER_REPO = "gcr.io/knative-samples"


def _get_env(env: Mapping[str, str], name: str, default: Optional[str] = None) -> Optional[str]:
    value = env.get(name, default)
    return value if value not in (None, "") else default


def _get_float(env: Mapping[str, str], name: str, default: float) -> float:
    value = _get_env(env, name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {value!r}") from None


def _get_bool(env: Mapping[str, str], name: str, default: bool = False) -> bool:
    value = _get_env(env, name)
    if value is None:
        return default
    return value.lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class E2ESettings:
    kubeconfig_path: str = DEFAULT_KUBECONFIG_PATH
    namespace: str = DEFAULT_NAMESPACE
    docker_repo: str = DEFAULT_DOCKER_REPO
    image_tag: str = "latest"
    poll_interval: float = 1.0
    max_poll_interval: float = 10.0
    poll_timeout: float = 600.0
    steady_state_hold: float = 0.0
    temp_namespace: bool = False
    enable_tracing: bool = False
    trace_service_name: str = "knative-e2e"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "E2ESettings":
        """Builds settings from environment variables, falling back to defaults."""
        env = os.environ if env is None else env
        settings = cls(
            kubeconfig_path=os.path.expanduser(
                _get_env(env, "KUBECONFIG", DEFAULT_KUBECONFIG_PATH)
            ),
            namespace=_get_env(env, "SERVING_TEST_NAMESPACE", DEFAULT_NAMESPACE),
            docker_repo=_get_env(env, "KO_DOCKER_REPO", DEFAULT_DOCKER_REPO),
            image_tag=_get_env(env, "IMAGE_TAG", "latest"),
            poll_interval=_get_float(env, "E2E_POLL_INTERVAL", 1.0),
            max_poll_interval=_get_float(env, "E2E_MAX_POLL_INTERVAL", 10.0),
            poll_timeout=_get_float(env, "E2E_POLL_TIMEOUT", 600.0),
            steady_state_hold=_get_float(env, "E2E_STEADY_STATE_HOLD", 0.0),
            temp_namespace=_get_bool(env, "E2E_TEMP_NAMESPACE"),
            enable_tracing=_get_bool(env, "E2E_ENABLE_TRACING"),
            trace_service_name=_get_env(env, "E2E_TRACE_SERVICE_NAME", "knative-e2e"),
        )
        if settings.poll_interval <= 0:
            raise ValueError("E2E_POLL_INTERVAL must be positive")
        if settings.poll_timeout < 0 or settings.steady_state_hold < 0:
            raise ValueError("E2E_POLL_TIMEOUT and E2E_STEADY_STATE_HOLD must not be negative")
        return settings

    def image_path(self, name: str) -> str:
        """Fully qualified reference of a test image, e.g. ``<repo>/helloworld:latest``."""
        return f"{self.docker_repo.rstrip('/')}/{name}:{self.image_tag}"
