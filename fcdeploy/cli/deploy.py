"""
Deployment lifecycle for the command line.

Sequences the library entry points the way the ``fcdeploy`` commands need
them: load -> validate -> compile -> write template -> reconcile.
"""

from pathlib import Path
from typing import Callable

import click

from fcdeploy.compilation.compiler import TemplateCompiler
from fcdeploy.config.loader import load_service
from fcdeploy.config.provider import DeployOptions
from fcdeploy.core.service import ServiceDefinition
from fcdeploy.core.validation import validate_service
from fcdeploy.deployment.engine import ReconciliationEngine
from fcdeploy.deployment.progress import DeploymentTrace, ProgressLogger
from fcdeploy.providers.base import Provider
from fcdeploy.providers.local import LocalProvider
from fcdeploy.resources.graph import ResourceGraph

TEMPLATE_FILE_NAME = "configuration-template.json"
STATE_FILE_NAME = "local-state.json"


class DeploymentCLI:
    """
    CLI interface for service deployment.

    Provides commands for:
    - Validating a service definition
    - Compiling it to a JSON resource template
    - Reconciling the template against a provider
    """

    def __init__(self, verbose: bool = True, sink: Callable[[str], None] | None = click.echo):
        """
        Initialize deployment CLI.

        Args:
            verbose: Print compilation progress
            sink: Where progress lines go
        """
        self.verbose = verbose
        self.sink = sink

    def load(
        self, service_dir: str | Path, stage: str | None = None, region: str | None = None
    ) -> ServiceDefinition:
        """Load and validate the service in ``service_dir``."""
        definition = load_service(service_dir, stage=stage, region=region)
        validate_service(definition)
        return definition

    def compile_service(self, definition: ServiceDefinition) -> ResourceGraph:
        logger = ProgressLogger(sink=self.sink) if self.verbose else None
        return TemplateCompiler(logger=logger).compile(definition)

    def write_template(self, graph: ResourceGraph, output: str | Path) -> Path:
        """
        Write the compiled graph as JSON.

        Args:
            graph: Compiled resource graph
            output: Target file, or a directory to place the default file in

        Returns:
            Path of the written template
        """
        path = Path(output)
        if path.suffix != ".json":
            path = path / TEMPLATE_FILE_NAME
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(graph.to_json())
        return path

    def read_template(self, template: str | Path) -> ResourceGraph:
        return ResourceGraph.from_json(Path(template).read_text())

    def local_provider(self, definition: ServiceDefinition, state_path: str | Path) -> LocalProvider:
        return LocalProvider(
            region=definition.region,
            account_id=definition.account_id,
            state_path=state_path,
        )

    def deploy(
        self,
        graph: ResourceGraph,
        provider: Provider,
        options: DeployOptions | None = None,
    ) -> DeploymentTrace:
        """
        Reconcile ``graph`` against ``provider``.

        Raises:
            DeploymentError: If a provider call fails
        """
        engine = ReconciliationEngine(
            provider, logger=ProgressLogger(sink=self.sink), options=options
        )
        return engine.deploy(graph)
