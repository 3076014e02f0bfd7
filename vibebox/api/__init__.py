"""Caller-facing API: data model and the provider contract."""

from .model import Flavor as Flavor
from .model import NetworkConfig as NetworkConfig
from .model import ProviderHealthStatus as ProviderHealthStatus
from .model import ProviderType as ProviderType
from .model import ResourceInfo as ResourceInfo
from .model import ResourceMetadata as ResourceMetadata
from .model import ResourceSpec as ResourceSpec
from .model import ResourceStatus as ResourceStatus
from .model import RetryOptions as RetryOptions
from .model import WaitForStatusOptions as WaitForStatusOptions
from .provider import Credentials as Credentials
from .provider import ProviderConfig as ProviderConfig
from .provider import ResourceProvider as ResourceProvider
