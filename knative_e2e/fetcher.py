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
Read-only access to Knative resources, returned as snapshots.
"""

import logging

from kubernetes import client

from .constants import (
    CONFIGURATION_PLURAL,
    NOT_PENDING_FIELD_SELECTOR,
    REVISION_PLURAL,
    SERVICE_PLURAL,
    SERVING_API_GROUP,
    SERVING_API_VERSION,
)
from .errors import FatalFetchError
from .snapshots import (
    ConfigurationSnapshot,
    PodSetSnapshot,
    PodStatus,
    ResourceKind,
    RevisionSnapshot,
    ServiceSnapshot,
)

logger = logging.getLogger(__name__)


class ResourceFetcher:
    """Fetches Knative Serving resources and pods from one namespace."""

    def __init__(
        self,
        namespace: str,
        custom_objects_api: client.CustomObjectsApi,
        core_v1_api: client.CoreV1Api,
    ):
        if not namespace:
            raise ValueError("Namespace must be provided.")
        self.namespace = namespace
        self.custom_objects_api = custom_objects_api
        self.core_v1_api = core_v1_api

    def _get_serving_object(self, plural: str, name: str) -> dict:
        if not name:
            raise FatalFetchError(f"Cannot fetch {plural}: no name given.")
        return self.custom_objects_api.get_namespaced_custom_object(
            group=SERVING_API_GROUP,
            version=SERVING_API_VERSION,
            namespace=self.namespace,
            plural=plural,
            name=name,
        )

    def get_service(self, name: str) -> ServiceSnapshot:
        return ServiceSnapshot.from_object(self._get_serving_object(SERVICE_PLURAL, name))

    def get_configuration(self, name: str) -> ConfigurationSnapshot:
        return ConfigurationSnapshot.from_object(
            self._get_serving_object(CONFIGURATION_PLURAL, name)
        )

    def get_revision(self, name: str) -> RevisionSnapshot:
        return RevisionSnapshot.from_object(self._get_serving_object(REVISION_PLURAL, name))

    def list_pods(
        self, label_selector: str, field_selector: str | None = NOT_PENDING_FIELD_SELECTOR
    ) -> PodSetSnapshot:
        """Lists the pods matching the selectors."""
        kwargs = {"label_selector": label_selector}
        if field_selector:
            kwargs["field_selector"] = field_selector
        pod_list = self.core_v1_api.list_namespaced_pod(self.namespace, **kwargs)
        return PodSetSnapshot(
            label_selector=label_selector,
            field_selector=field_selector,
            pods=tuple(PodStatus.from_pod(pod) for pod in pod_list.items or []),
        )

    def fetch(self, kind: ResourceKind, name: str):
        """Fetches a snapshot by kind. For pod sets ``name`` is the label selector."""
        if kind is ResourceKind.SERVICE:
            return self.get_service(name)
        if kind is ResourceKind.CONFIGURATION:
            return self.get_configuration(name)
        if kind is ResourceKind.REVISION:
            return self.get_revision(name)
        if kind is ResourceKind.POD_SET:
            return self.list_pods(name)
        raise FatalFetchError(f"Unsupported resource kind: {kind}")
