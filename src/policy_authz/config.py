"""
Runtime settings read from the environment.

Call dotenv's load_dotenv() before load_settings() so values from .env are
visible. Set AUTHZ_CACHE_FILE to enable the compiled-index cache; leave it
unset or empty to always compile.
"""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class AuthzSettings:
    policy_file: str = "policy.yaml"
    cache_file: Optional[str] = None
    # Headers set by the upstream component that authenticated the caller.
    user_header: str = "X-Authz-User"
    groups_header: str = "X-Authz-Groups"


def load_settings() -> AuthzSettings:
    """Build AuthzSettings from AUTHZ_* environment variables."""
    return AuthzSettings(
        policy_file=os.getenv("AUTHZ_POLICY_FILE", "policy.yaml"),
        cache_file=os.getenv("AUTHZ_CACHE_FILE") or None,
        user_header=os.getenv("AUTHZ_USER_HEADER", "X-Authz-User"),
        groups_header=os.getenv("AUTHZ_GROUPS_HEADER", "X-Authz-Groups"),
    )
