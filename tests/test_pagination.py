"""Tests for page metadata."""

import pytest

from yafoy.schemas.pagination import PageMeta


class TestPageMeta:
    def test_first_page(self):
        meta = PageMeta.build(total_items=45, page=1, per_page=20)

        assert meta.total_pages == 3
        assert (meta.start_index, meta.end_index) == (1, 20)
        assert meta.offset == 0

    def test_last_partial_page(self):
        meta = PageMeta.build(total_items=45, page=3, per_page=20)

        assert meta.current_page == 3
        assert (meta.start_index, meta.end_index) == (41, 45)
        assert meta.offset == 40

    @pytest.mark.parametrize("page,expected", [(0, 1), (-4, 1), (9, 3)])
    def test_page_clamped(self, page, expected):
        assert PageMeta.build(total_items=45, page=page, per_page=20).current_page == expected

    def test_empty_collection(self):
        meta = PageMeta.build(total_items=0, page=5, per_page=20)

        assert meta.current_page == 1
        assert meta.total_pages == 0
        assert (meta.start_index, meta.end_index) == (0, 0)
        assert meta.offset == 0

    def test_exact_multiple(self):
        meta = PageMeta.build(total_items=40, page=2, per_page=20)

        assert meta.total_pages == 2
        assert (meta.start_index, meta.end_index) == (21, 40)
