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
import re
from dataclasses import dataclass

# Leaves room for the suffix and for the revision suffix added by the reconciler.
MAX_NAME_PREFIX_LENGTH = 40


@dataclass
class ResourceNames:
    """Names of the resources one scenario run owns."""

    service: str
    config: str
    image: str
    revision: str | None = None

    @classmethod
    def for_service(cls, service: str, image: str) -> "ResourceNames":
        return cls(service=service, config=service, image=image)


def object_name_for_test(test_name: str) -> str:
    """Derives a unique DNS-1035 name from a test name, e.g. ``test_dead_start``."""
    prefix = re.sub(r"[^a-z0-9]+", "-", test_name.lower()).strip("-")
    prefix = re.sub(r"^[^a-z]+", "", prefix) or "test"
    prefix = prefix[:MAX_NAME_PREFIX_LENGTH].rstrip("-")
    return f"{prefix}-{os.urandom(3).hex()}"
