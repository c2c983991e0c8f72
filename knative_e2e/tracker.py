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
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RevisionRecord:
    name: str
    generation: int


@dataclass
class RevisionTracker:
    """Revisions a scenario has observed, in the order they were created."""

    history: list[RevisionRecord] = field(default_factory=list)

    @property
    def current(self) -> RevisionRecord | None:
        return self.history[-1] if self.history else None

    @property
    def current_name(self) -> str | None:
        return self.history[-1].name if self.history else None

    @property
    def first(self) -> RevisionRecord | None:
        return self.history[0] if self.history else None

    @property
    def second(self) -> RevisionRecord | None:
        return self.history[1] if len(self.history) > 1 else None

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(record.name for record in self.history)

    def record(self, name: str, generation: int) -> RevisionRecord:
        if name in self.names:
            raise ValueError(f"Revision {name} has already been recorded.")
        revision = RevisionRecord(name=name, generation=generation)
        self.history.append(revision)
        logger.info(f"Recorded revision {name} (generation {generation}).")
        return revision
