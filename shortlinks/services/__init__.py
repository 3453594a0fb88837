"""Service layer for the short links application.

Services hold the business rules and orchestrate repository calls.
"""

from shortlinks.services.codegen import CodeGenerator
from shortlinks.services.links import LinkService, OwnedLink

__all__ = ["CodeGenerator", "LinkService", "OwnedLink"]
