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

import logging
import os
import sys
from typing import Dict, Optional

import kubernetes
import yaml

from .config import E2ESettings
from .constants import (
    MIN_SCALE_ANNOTATION_KEY,
    PROGRESS_DEADLINE_ANNOTATION_KEY,
    SERVICE_PLURAL,
    SERVING_API_GROUP,
    SERVING_API_VERSION,
    TEMP_NAMESPACE_LABEL_KEY,
)
from .fetcher import ResourceFetcher
from .names import ResourceNames, object_name_for_test

logging.basicConfig(level=logging.INFO,
                    format='%(asctime)s - %(levelname)s - %(message)s',
                    stream=sys.stdout)

SERVICE_MANIFEST = """
apiVersion: serving.knative.dev/v1
kind: Service
metadata:
  name: {name}
spec:
  template:
    spec:
      containers:
      - image: {image}
"""

# Attempts for read-modify-write updates that hit a resourceVersion conflict.
UPDATE_CONFLICT_RETRIES = 3


class TestContext:
    """Context for E2E tests, managing Kubernetes interactions"""

    # Not a pytest test class.
    __test__ = False

    def __init__(self, settings: Optional[E2ESettings] = None):
        self.settings = settings or E2ESettings.from_env()
        self.kubeconfig_path = os.path.expanduser(self.settings.kubeconfig_path)
        self._api_client = None
        self.namespace = self.settings.namespace

    def get_api_client(self):
        """Returns a Kubernetes API client"""
        if not self._api_client:
            self._api_client = kubernetes.config.new_client_from_config(
                self.kubeconfig_path
            )
        return self._api_client

    def get_core_v1_api(self):
        """Returns the CoreV1Api client"""
        return kubernetes.client.CoreV1Api(self.get_api_client())

    def get_custom_objects_api(self):
        """Returns the CustomObjectsApi client"""
        return kubernetes.client.CustomObjectsApi(self.get_api_client())

    def fetcher(self, namespace: Optional[str] = None) -> ResourceFetcher:
        """Returns a read-only fetcher bound to the namespace"""
        return ResourceFetcher(
            namespace or self.namespace,
            self.get_custom_objects_api(),
            self.get_core_v1_api(),
        )

    def create_temp_namespace(self, prefix: str = "serving-e2e") -> str:
        """Creates a uniquely named, labelled namespace and makes it current"""
        namespace = object_name_for_test(prefix)
        self.get_core_v1_api().create_namespace(body={
            "apiVersion": "v1",
            "kind": "Namespace",
            "metadata": {
                "name": namespace,
                "labels": {TEMP_NAMESPACE_LABEL_KEY: "true"},
            },
        })
        self.namespace = namespace
        logging.info(f"Scenario resources will be created in namespace {namespace}.")
        return namespace

    def delete_namespace(self, namespace: Optional[str] = None):
        """Deletes a namespace from create_temp_namespace, then falls back to the configured one"""
        namespace = namespace or self.namespace
        if namespace == self.settings.namespace:
            raise ValueError(
                f"Refusing to delete the shared test namespace {namespace}."
            )
        try:
            self.get_core_v1_api().delete_namespace(name=namespace)
            logging.info(f"Deleted namespace {namespace}.")
        except kubernetes.client.rest.ApiException as e:
            if e.status != 404:
                raise
            logging.info(f"Namespace {namespace} already gone.")
        if self.namespace == namespace:
            self.namespace = self.settings.namespace

    def build_service_manifest(
        self,
        names: ResourceNames,
        image: str,
        min_scale: Optional[int] = None,
        revision_timeout_seconds: Optional[int] = None,
        progress_deadline: Optional[str] = None,
    ) -> Dict:
        """Renders the Knative Service manifest for a scenario"""
        manifest = yaml.safe_load(
            SERVICE_MANIFEST.format(name=names.service, image=image)
        )
        template = manifest["spec"]["template"]

        annotations = {}
        if min_scale is not None:
            annotations[MIN_SCALE_ANNOTATION_KEY] = str(min_scale)
        if progress_deadline:
            annotations[PROGRESS_DEADLINE_ANNOTATION_KEY] = progress_deadline
        if annotations:
            template["metadata"] = {"annotations": annotations}
        if revision_timeout_seconds is not None:
            template["spec"]["timeoutSeconds"] = revision_timeout_seconds
        return manifest

    def create_service(
        self,
        names: ResourceNames,
        image: str,
        min_scale: Optional[int] = None,
        revision_timeout_seconds: Optional[int] = None,
        progress_deadline: Optional[str] = None,
    ) -> Dict:
        """Creates a Knative Service in the context namespace"""
        manifest = self.build_service_manifest(
            names,
            image,
            min_scale=min_scale,
            revision_timeout_seconds=revision_timeout_seconds,
            progress_deadline=progress_deadline,
        )
        logging.info(
            f"Creating Service '{names.service}' in namespace '{self.namespace}' "
            f"with image '{image}'"
        )
        return self.get_custom_objects_api().create_namespaced_custom_object(
            group=SERVING_API_GROUP,
            version=SERVING_API_VERSION,
            namespace=self.namespace,
            plural=SERVICE_PLURAL,
            body=manifest,
        )

    def update_service_image(self, names: ResourceNames, image: str) -> Dict:
        """Replaces the container image of a Service, retrying on conflicts"""
        custom_objects_api = self.get_custom_objects_api()
        for attempt in range(1, UPDATE_CONFLICT_RETRIES + 1):
            existing = custom_objects_api.get_namespaced_custom_object(
                group=SERVING_API_GROUP,
                version=SERVING_API_VERSION,
                namespace=self.namespace,
                plural=SERVICE_PLURAL,
                name=names.service,
            )
            existing["spec"]["template"]["spec"]["containers"][0]["image"] = image
            logging.info(f"Updating Service '{names.service}' with image '{image}'")
            try:
                return custom_objects_api.replace_namespaced_custom_object(
                    group=SERVING_API_GROUP,
                    version=SERVING_API_VERSION,
                    namespace=self.namespace,
                    plural=SERVICE_PLURAL,
                    name=names.service,
                    body=existing,
                )
            except kubernetes.client.rest.ApiException as e:
                if e.status == 409 and attempt < UPDATE_CONFLICT_RETRIES:  # Conflict
                    logging.warning(
                        f"Service {names.service} was modified concurrently. Retrying..."
                    )
                    continue
                raise

    def delete_service(self, names: ResourceNames):
        """Deletes a Service, ignoring one that is already gone"""
        try:
            self.get_custom_objects_api().delete_namespaced_custom_object(
                group=SERVING_API_GROUP,
                version=SERVING_API_VERSION,
                namespace=self.namespace,
                plural=SERVICE_PLURAL,
                name=names.service,
            )
            logging.info(f"Deleted Service: {names.service}")
        except kubernetes.client.rest.ApiException as e:
            if e.status == 404:
                logging.info(f"Service {names.service} not found, skipping deletion.")
            else:
                raise
