"""Deployment: reconciling resource graphs against a provider."""

from fcdeploy.deployment.progress import DeploymentTrace, ProgressLogger
from fcdeploy.deployment.engine import ReconciliationEngine, deploy
from fcdeploy.errors import DeploymentError

__all__ = [
    "DeploymentTrace",
    "ProgressLogger",
    "ReconciliationEngine",
    "deploy",
    "DeploymentError",
]
