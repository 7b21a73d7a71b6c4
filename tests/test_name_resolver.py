from __future__ import annotations

from reslink.core.name_resolver import NameResolver
from reslink.models import LinkProfile


def make_resolver() -> NameResolver:
    return NameResolver('res://resources/dice')


def test_resolution_is_deterministic() -> None:
    resolver = make_resolver()
    assert resolver.resolve('Fire D6 Grant') == 'res://resources/dice/d6_fire.tres'
    assert resolver.resolve('Neutral D10 Bonus') == 'res://resources/dice/d10_none.tres'
    assert resolver.resolve('Mystery Widget') is None


def test_token_list_order_breaks_ties() -> None:
    resolver = make_resolver()
    # d8 precedes d4 and fire precedes shadow in the token lists.
    assert resolver.resolve('D4 to D8 Shadow Fire') == 'res://resources/dice/d8_fire.tres'
    assert resolver.resolve('D12 Icefire') == 'res://resources/dice/d12_fire.tres'


def test_resolver_from_profile() -> None:
    profile = LinkProfile(
        target_dir='res://dice',
        target_field='granted_dice',
        size_tokens=['d6'],
        element_tokens=['frost'],
        none_token='plain',
        extension='.res',
    )
    resolver = NameResolver.from_profile(profile)
    assert resolver.resolve('FROST D6') == 'res://dice/d6_frost.res'
    assert resolver.resolve('Fire D6') == 'res://dice/d6_plain.res'
    assert resolver.resolve('Fire D8') is None
