"""
Providers: the collaborators that read and change remote state.

The deployment engine only depends on the abstract Provider. LocalProvider
emulates Aliyun in memory for development and tests.

Example:
    from fcdeploy.providers import LocalProvider

    provider = LocalProvider(region="cn-hangzhou")
"""

from fcdeploy.providers.base import Provider, ProviderSettings
from fcdeploy.providers.local import LocalProvider, LocalState

__all__ = ["Provider", "ProviderSettings", "LocalProvider", "LocalState"]
