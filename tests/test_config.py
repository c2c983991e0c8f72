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

import re
from unittest.mock import MagicMock

import pytest
from kubernetes.client.rest import ApiException

from knative_e2e import tracing
from knative_e2e.config import E2ESettings
from knative_e2e.errors import FatalFetchError, is_fatal_error
from knative_e2e.names import object_name_for_test


def test_defaults_from_empty_environment():
    settings = E2ESettings.from_env({})

    assert settings.namespace == "serving-tests"
    assert settings.poll_interval == 1.0
    assert settings.poll_timeout == 600.0
    assert settings.enable_tracing is False
    assert not settings.kubeconfig_path.startswith("~")


def test_environment_overrides():
    settings = E2ESettings.from_env({
        "KUBECONFIG": "/etc/kube/config",
        "SERVING_TEST_NAMESPACE": "serving-e2e",
        "KO_DOCKER_REPO": "registry.example.com/serving/",
        "IMAGE_TAG": "v1.2",
        "E2E_POLL_TIMEOUT": "120",
        "E2E_STEADY_STATE_HOLD": "30",
        "E2E_ENABLE_TRACING": "true",
        "E2E_TEMP_NAMESPACE": "1",
        "E2E_POLL_INTERVAL": "",
    })

    assert settings.kubeconfig_path == "/etc/kube/config"
    assert settings.namespace == "serving-e2e"
    assert settings.poll_timeout == 120.0
    assert settings.steady_state_hold == 30.0
    assert settings.enable_tracing is True
    assert settings.temp_namespace is True
    assert settings.poll_interval == 1.0
    assert settings.image_path("helloworld") == "registry.example.com/serving/helloworld:v1.2"


@pytest.mark.parametrize("env", [
    {"E2E_POLL_TIMEOUT": "ten minutes"},
    {"E2E_POLL_INTERVAL": "0"},
    {"E2E_STEADY_STATE_HOLD": "-1"},
])
def test_invalid_values_rejected(env):
    with pytest.raises(ValueError):
        E2ESettings.from_env(env)


def test_tracer_disabled_by_default():
    assert tracing.get_tracer(E2ESettings()) is None


def test_tracer_provider_initialised_once(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(tracing, "_TRACER_PROVIDER", None)
    set_provider = MagicMock()
    monkeypatch.setattr(tracing.trace, "set_tracer_provider", set_provider)
    monkeypatch.setattr(tracing.atexit, "register", lambda fn: None)
    exporter = MagicMock()

    first = tracing.initialize_tracer("knative-e2e", exporter=exporter)
    second = tracing.initialize_tracer("knative-e2e", exporter=exporter)

    assert first is second
    set_provider.assert_called_once_with(first)


@pytest.mark.parametrize("error, allow_missing, fatal", [
    (ApiException(status=404), False, True),
    (ApiException(status=404), True, False),
    (ApiException(status=401), True, True),
    (ApiException(status=422), False, True),
    (ApiException(status=409), False, False),
    (ApiException(status=500), False, False),
    (ApiException(status=429), False, False),
    (FatalFetchError("gone"), False, True),
    (ValueError("bad selector"), False, True),
    (ConnectionError("reset"), False, False),
    (TimeoutError("read timed out"), False, False),
])
def test_error_classification(error, allow_missing, fatal):
    assert is_fatal_error(error, allow_missing=allow_missing) is fatal


def test_object_name_for_test():
    name = object_name_for_test("test_dead_start_to_healthy[param]")

    assert re.fullmatch(r"test-dead-start-to-healthy-param-[0-9a-f]{6}", name)
    assert object_name_for_test("test_x") != object_name_for_test("test_x")


def test_object_name_is_dns_safe():
    name = object_name_for_test("123_" + "very_long_name_" * 10)

    assert len(name) <= 63
    assert name[0].isalpha()
    assert re.fullmatch(r"[a-z0-9-]+", name)
