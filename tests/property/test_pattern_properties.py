from __future__ import annotations

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from bulksink.core.errors import PatternRenderError
from bulksink.core.pattern import Pattern

pytestmark = pytest.mark.property

field_name = st.text(
    alphabet=st.characters(whitelist_categories=("Ll",), max_codepoint=127),
    min_size=1,
    max_size=12,
)
field_value = st.text(
    alphabet=st.characters(min_codepoint=32, max_codepoint=126),
    max_size=30,
)
literal = st.text(
    alphabet=st.characters(min_codepoint=32, max_codepoint=126).filter(
        lambda c: c not in "${}"
    ),
    max_size=10,
)


@given(prefix=literal, name=field_name, value=field_value, suffix=literal)
@settings(max_examples=200)
def test_strict_render_is_deterministic_substitution(
    prefix: str, name: str, value: str, suffix: str
) -> None:
    pattern = Pattern.compile(f"{prefix}${{{name}}}{suffix}")
    header = {name: value}

    rendered = pattern.render_strict(header)

    assert rendered == f"{prefix}{value}{suffix}"
    assert rendered == pattern.render_strict(header)
    assert rendered == pattern.render(header)


@given(prefix=literal, name=field_name, suffix=literal)
@settings(max_examples=200)
def test_undefined_reference_strict_fails_non_strict_empties(
    prefix: str, name: str, suffix: str
) -> None:
    pattern = Pattern.compile(f"{prefix}${{{name}}}{suffix}")

    with pytest.raises(PatternRenderError):
        pattern.render_strict({})
    assert pattern.render({}) == f"{prefix}{suffix}"
