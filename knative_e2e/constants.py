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

# Constants for API Groups and Resources
SERVING_API_GROUP = "serving.knative.dev"
SERVING_API_VERSION = "v1"
SERVICE_PLURAL = "services"
CONFIGURATION_PLURAL = "configurations"
REVISION_PLURAL = "revisions"

CONFIGURATION_LABEL_KEY = "serving.knative.dev/configuration"
CONFIGURATION_GENERATION_LABEL_KEY = "serving.knative.dev/configurationGeneration"

# Marks namespaces created for a single test run.
TEMP_NAMESPACE_LABEL_KEY = "e2e.knative.dev/temporary"

MIN_SCALE_ANNOTATION_KEY = "autoscaling.knative.dev/min-scale"
PROGRESS_DEADLINE_ANNOTATION_KEY = "serving.knative.dev/progress-deadline"

NOT_PENDING_FIELD_SELECTOR = "status.phase!=Pending"
POD_PHASE_PENDING = "Pending"

# Resource condition types and statuses
CONDITION_READY = "Ready"
STATUS_TRUE = "True"
STATUS_FALSE = "False"
STATUS_UNKNOWN = "Unknown"

# Ready=False reasons the reconciler never recovers from on its own.
TERMINAL_REVISION_REASONS = frozenset({"ProgressDeadlineExceeded", "ContainerMissing"})

# Named wait points
SERVICE_IS_CREATED = "ServiceIsCreated"
CONFIGURATION_UPDATED_WITH_REVISION = "ConfigurationUpdatedWithRevision"
REVISION_IS_READY = "RevisionIsReady"
CONFIGURATION_IS_RESTARTING = "ConfigurationIsRestarting"
CONFIGURATION_IS_SCALED_TO_ZERO = "ConfigurationIsScaledToZero"
CONFIGURATION_WAITING_TO_BECOME_READY = "ConfigurationWaitingToBecomeReady"

# Test images
DEAD_START_IMAGE = "deadstart"
HELLO_WORLD_IMAGE = "helloworld"
