"""Azure CLI wrappers and ARM what-if models."""

from libraries.azure.cli import (
    AzAccountInfo,
    AzureCli,
    NotAuthenticatedError,
    render_parameters,
)
from libraries.azure.whatif import (
    AzureResource,
    ChangeType,
    ResourceChange,
    WhatIfParseError,
    WhatIfResult,
    load_whatif,
    parse_whatif,
)

__all__ = [
    "AzAccountInfo",
    "AzureCli",
    "AzureResource",
    "ChangeType",
    "NotAuthenticatedError",
    "ResourceChange",
    "WhatIfParseError",
    "WhatIfResult",
    "load_whatif",
    "parse_whatif",
    "render_parameters",
]
