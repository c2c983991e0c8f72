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

import atexit
import logging
import threading

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

# --- Global state for the singleton TracerProvider ---
_TRACER_PROVIDER = None
_TRACER_PROVIDER_LOCK = threading.Lock()


def initialize_tracer(service_name: str, exporter=None):
    """Initializes and registers a global tracer provider using double-checked locking."""
    global _TRACER_PROVIDER
    # First check (no lock) for performance.
    if _TRACER_PROVIDER is not None:
        return _TRACER_PROVIDER

    with _TRACER_PROVIDER_LOCK:
        # Second check (with lock) to ensure thread safety.
        if _TRACER_PROVIDER is None:
            resource = Resource(attributes={"service.name": service_name})
            provider = TracerProvider(resource=resource)
            provider.add_span_processor(
                BatchSpanProcessor(exporter or OTLPSpanExporter())
            )
            trace.set_tracer_provider(provider)
            # Ensure shutdown is called only once when the process exits.
            atexit.register(provider.shutdown)
            _TRACER_PROVIDER = provider
            logging.info(
                f"Global OpenTelemetry TracerProvider configured for service '{service_name}'.")
    return _TRACER_PROVIDER


def get_tracer(settings):
    """Returns a tracer for wait points, or None when tracing is disabled."""
    if not settings.enable_tracing:
        return None
    initialize_tracer(settings.trace_service_name)
    return trace.get_tracer(settings.trace_service_name.replace("-", "_"))
