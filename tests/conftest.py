"""Shared test fixtures and Hypothesis strategies."""

from __future__ import annotations

from uuid import UUID

import pytest
from hypothesis import strategies as st

from typedid import TypeID, TypeIDRegistry, default_registry, factory


# =============================================================================
# Entities and Type Aliases
# =============================================================================


class User:
    pass


class Order:
    pass


class Organization:
    pass


class ApiKey:
    __typeid_prefix__ = "api_key"


default_registry.register(Organization, "org")

UserId = TypeID[User]
OrderId = TypeID[Order]
OrgId = TypeID[Organization]
ApiKeyId = TypeID[ApiKey]

UserIdFactory = factory(UserId)
OrderIdFactory = factory(OrderId)
OrgIdFactory = factory(OrgId)
ApiKeyIdFactory = factory(ApiKeyId)

# Example id from the published TypeID test vectors.
EXAMPLE_SUFFIX = "01h455vb4pex5vsknk084sn02q"
EXAMPLE_UUID = UUID("01890a5d-ac96-774b-bcce-b302099a8057")


# =============================================================================
# Hypothesis Strategies
# =============================================================================

# Strategy for valid non-empty prefixes
prefix_strategy = st.from_regex(r"[a-z]([a-z_]{0,61}[a-z])?", fullmatch=True)

# Strategy for valid prefixes, including the empty one
any_prefix_strategy = st.one_of(st.just(""), prefix_strategy)

# Strategy for 16-byte UUID payloads
uuid_bytes_strategy = st.binary(min_size=16, max_size=16)

# Strategy for valid 26-char suffixes (first symbol limited to 3 bits)
suffix_strategy = st.builds(
    lambda first, rest: first + rest,
    st.sampled_from("01234567"),
    st.text(st.sampled_from("0123456789abcdefghjkmnpqrstvwxyz"), min_size=25, max_size=25),
)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def registry() -> TypeIDRegistry:
    """A fresh registry, isolated from the default one."""
    return TypeIDRegistry()
