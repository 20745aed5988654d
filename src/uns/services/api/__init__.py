"""API service package.

See Also:
    [Api][uns.services.api.Api]: HTTP front end over the resolver.
    [ApiConfig][uns.services.api.ApiConfig]: Configuration model.
"""

from .configs import ApiConfig
from .service import Api, error_status


__all__ = ["Api", "ApiConfig", "error_status"]
