"""Route discovery.

Module structure:
- types.py: Route, RouteKind and the RouteResolution tagged result
- resolver.py: RouteResolver (direct pair, then a bridged pair through the
  wrapped native asset)
"""

from gateway.routing.resolver import PairSource, RouteResolver
from gateway.routing.types import MAX_HOPS, Route, RouteKind, RouteResolution

__all__ = [
    "MAX_HOPS",
    "PairSource",
    "Route",
    "RouteKind",
    "RouteResolution",
    "RouteResolver",
]
