"""
Tests for EffectsQuery composition and keyset pagination.
"""
from trade_index.core.entities.effect import EffectType
from trade_index.core.entities.page import PageQuery
from trade_index.core.use_cases.effects_query import EffectsQuery

from conftest import EUR, USD, XLM


async def test_narrowing_returns_new_query(store):
    base = EffectsQuery(store).of_type(EffectType.TRADE)
    narrowed = base.for_account("GBUYER1")

    assert base.criteria.account is None
    assert narrowed.criteria.account == "GBUYER1"
    assert narrowed.criteria.type == EffectType.TRADE


async def test_type_filter_excludes_other_effects(store):
    records = await EffectsQuery(store).of_type(EffectType.TRADE).page(PageQuery(limit=10))
    assert len(records) == 3
    assert all(r.type == EffectType.TRADE for r in records)


async def test_no_filters_returns_everything(store):
    records = await EffectsQuery(store).page(PageQuery(limit=10))
    assert len(records) == 4


async def test_account_and_order_book_apply_together(store, trades):
    trades_q = EffectsQuery(store).of_type(EffectType.TRADE)

    by_account = await trades_q.for_account("GBUYER1").page(PageQuery(limit=10))
    assert [r.paging_token for r in by_account] == [trades[0].paging_token, trades[2].paging_token]

    by_book = await trades_q.for_order_book(USD, EUR).page(PageQuery(limit=10))
    assert [r.paging_token for r in by_book] == [trades[1].paging_token, trades[2].paging_token]

    both = await trades_q.for_account("GBUYER1").for_order_book(USD, EUR).page(PageQuery(limit=10))
    assert [r.paging_token for r in both] == [trades[2].paging_token]


async def test_order_book_is_directional(store):
    records = await EffectsQuery(store).for_order_book(USD, XLM).page(PageQuery(limit=10))
    assert records == ()


async def test_cursor_is_exclusive_in_both_directions(store, trades):
    q = EffectsQuery(store).of_type(EffectType.TRADE)

    after = await q.page(PageQuery(cursor=trades[0].paging_token, limit=10, order="asc"))
    assert [r.paging_token for r in after] == [trades[1].paging_token, trades[2].paging_token]

    before = await q.page(PageQuery(cursor=trades[2].paging_token, limit=10, order="desc"))
    assert [r.paging_token for r in before] == [trades[1].paging_token, trades[0].paging_token]


async def test_limit_bounds_and_desc_starts_from_newest(store, trades):
    q = EffectsQuery(store).of_type(EffectType.TRADE)
    records = await q.page(PageQuery(limit=2, order="desc"))
    assert [r.paging_token for r in records] == [trades[2].paging_token, trades[1].paging_token]


async def test_repeated_pages_are_identical(store):
    q = EffectsQuery(store).of_type(EffectType.TRADE).for_order_book(USD, EUR)
    page_query = PageQuery(limit=1)
    assert await q.page(page_query) == await q.page(page_query)
