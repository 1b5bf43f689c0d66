"""Property tests for unverified token inspection.

Malformed input must never raise and must always count as expired.
"""

from __future__ import annotations

import time

from hypothesis import given, settings, strategies as st

from storefront_sdk import tokens

from tests.helpers import make_token

# Strings whose segment count is anything but three
wrong_segment_tokens = st.text(max_size=200).filter(lambda s: s.count(".") != 2)
three_segment_junk = st.tuples(
    st.text(alphabet=st.characters(blacklist_characters="."), max_size=40),
    st.text(alphabet=st.characters(blacklist_characters="."), max_size=40),
    st.text(alphabet=st.characters(blacklist_characters="."), max_size=40),
).map(".".join)
claim_values = st.one_of(
    st.none(),
    st.booleans(),
    st.integers(),
    st.text(max_size=20),
    st.lists(st.integers(), max_size=3),
)


class TestDecodeProperties:
    """Property tests for decode and is_expired."""

    @given(token=wrong_segment_tokens)
    @settings(max_examples=200)
    def test_wrong_segment_count_fails_closed(self, token: str) -> None:
        """Anything without exactly three segments is unreadable and expired."""
        assert tokens.decode(token) is None
        assert tokens.is_expired(token) is True
        assert tokens.identity_from_token(token) is None

    @given(token=three_segment_junk)
    @settings(max_examples=200)
    def test_junk_never_raises(self, token: str) -> None:
        """Arbitrary three-segment strings decode to a dict or None."""
        payload = tokens.decode(token)

        assert payload is None or isinstance(payload, dict)
        if payload is None:
            assert tokens.is_expired(token) is True

    @given(
        claims=st.dictionaries(
            st.sampled_from(["sub", "email", "name", "role", "iat"]),
            st.text(max_size=20),
        )
    )
    @settings(max_examples=100)
    def test_missing_exp_is_expired(self, claims: dict[str, str]) -> None:
        """A readable token without exp is still expired."""
        assert tokens.is_expired(make_token(claims)) is True

    @given(offset=st.integers(min_value=-10_000, max_value=10_000))
    @settings(max_examples=100)
    def test_expiry_matches_clock(self, offset: int) -> None:
        """Expired exactly when exp is before the supplied time."""
        now = int(time.time())
        token = make_token({"exp": now + offset})

        assert tokens.is_expired(token, now=now) is (offset < 0)

    @given(exp=claim_values)
    @settings(max_examples=100)
    def test_non_numeric_exp_is_expired(self, exp: object) -> None:
        if isinstance(exp, int) and not isinstance(exp, bool):
            return
        assert tokens.is_expired(make_token({"exp": exp})) is True

    @given(role=st.one_of(st.none(), st.just(""), st.text(min_size=1, max_size=10)))
    @settings(max_examples=100)
    def test_identity_role_never_empty(self, role: str | None) -> None:
        """Identity from a readable token always has a role."""
        identity = tokens.identity_from_token(make_token({"sub": "1", "role": role}))

        assert identity is not None
        assert identity.role == (role or "user")
