"""
Login attempt limiter.

DRF's stock rate parser only understands ``N/unit``; the login window
is configured as e.g. ``10/10m`` so the parser here also accepts a
multiplier in front of the unit.
"""
from __future__ import annotations

import logging
import re

from rest_framework.throttling import SimpleRateThrottle

logger = logging.getLogger(__name__)

_RATE_RE = re.compile(r'^\s*(\d+)\s*/\s*(\d*)\s*([smhd])\w*\s*$')
_UNIT_SECONDS = {'s': 1, 'm': 60, 'h': 3600, 'd': 86400}


def parse_rate(rate):
    """``'10/10m'`` -> ``(10, 600)``; ``'5/min'`` -> ``(5, 60)``."""
    if rate is None:
        return None, None
    match = _RATE_RE.match(rate)
    if not match:
        raise ValueError(f'invalid rate {rate!r}')
    num, multiplier, unit = match.groups()
    return int(num), int(multiplier or 1) * _UNIT_SECONDS[unit]


class LoginRateThrottle(SimpleRateThrottle):
    """At most N login attempts per client IP within a fixed window."""
    scope = 'login'

    def parse_rate(self, rate):
        return parse_rate(rate)

    def get_cache_key(self, request, view):
        return self.cache_format % {'scope': self.scope, 'ident': self.get_ident(request)}

    def throttle_failure(self):
        logger.warning('login attempts throttled for %s', self.key)
        return False
