"""
Progress narration for deployments.

The lines written here are an observable contract: operators read them and
tests compare them line for line. All wording lives in this module.
"""

import threading
from typing import Callable, Iterator

import click


class DeploymentTrace(tuple):
    """Ordered, immutable sequence of the lines one run emitted."""

    def __new__(cls, lines=()):
        return super().__new__(cls, lines)

    def __repr__(self) -> str:
        return f"DeploymentTrace(lines={len(self)})"


class ProgressLogger:
    """
    Records progress lines and forwards each one to a sink.

    Emission is serialized with a lock, so lines from concurrent upload
    workers are never torn or lost.

    Example:
        logger = ProgressLogger()                 # echoes to stdout
        quiet = ProgressLogger(sink=lambda line: None)
        quiet.creating("service", "my-service-dev")
        quiet.trace  # ('Creating service my-service-dev...',)
    """

    def __init__(self, sink: Callable[[str], None] | None = click.echo):
        self._sink = sink
        self._lines: list[str] = []
        self._lock = threading.Lock()

    def log(self, line: str) -> None:
        with self._lock:
            self._lines.append(line)
            if self._sink is not None:
                self._sink(line)

    @property
    def trace(self) -> DeploymentTrace:
        with self._lock:
            return DeploymentTrace(self._lines)

    def trace_since(self, start: int) -> DeploymentTrace:
        """Lines recorded after the first ``start`` ones."""
        with self._lock:
            return DeploymentTrace(self._lines[start:])

    def line_count(self) -> int:
        with self._lock:
            return len(self._lines)

    def __iter__(self) -> Iterator[str]:
        return iter(self.trace)

    # Message families

    def creating(self, what: str, name: str) -> None:
        self.log(f"Creating {what} {name}...")

    def created(self, what: str, name: str) -> None:
        self.log(f"Created {what} {name}")

    def updating(self, what: str, name: str) -> None:
        self.log(f"Updating {what} {name}...")

    def updated(self, what: str, name: str) -> None:
        self.log(f"Updated {what} {name}")

    def exists(self, what: str, name: str) -> None:
        # "Service my-service-dev already exists."
        self.log(f"{what[:1].upper()}{what[1:]} {name} already exists.")

    def uploading(self, object_name: str, bucket: str) -> None:
        self.log(f"Uploading {object_name} to OSS bucket {bucket}...")

    def uploaded(self, object_name: str, bucket: str) -> None:
        self.log(f"Uploaded {object_name} to OSS bucket {bucket}")

    def attaching(self, policy: str, role: str) -> None:
        self.log(f"Attaching RAM policy {policy} to {role}...")

    def attached(self, policy: str, role: str) -> None:
        self.log(f"Attached RAM policy {policy} to {role}")

    def deploying(self, api_name: str) -> None:
        self.log(f"Deploying API {api_name}...")

    def deployed(self, api_name: str) -> None:
        self.log(f"Deployed API {api_name}")

    def route(self, method: str, subdomain: str, path: str, service: str, function: str) -> None:
        """Report where a deployed HTTP function can be reached."""
        if not path.startswith("/"):
            path = f"/{path}"
        self.log(f"{method} http://{subdomain}{path} -> {service}.{function}")

    def compiling(self, function_key: str) -> None:
        self.log(f'Compiling function "{function_key}"...')
