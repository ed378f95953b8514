from slowapi import Limiter
from slowapi.util import get_remote_address

import config

# Limits are per client address, in memory; one process per instance
limiter = Limiter(key_func=get_remote_address, enabled=config.RATE_LIMIT_ENABLED)
