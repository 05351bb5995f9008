"""Filter composition test cases."""
from docstore.repository.filters import (
    DESCENDING,
    Filter,
    find_options,
    merge_filter,
    sort_spec,
)


class TestMergeFilter:
    """Test soft-delete enforcement and regex rewriting."""

    def test_excludes_soft_deleted(self):
        merged = merge_filter(Filter(filter={"name": "a"}))
        assert merged.filter == {"name": "a", "deleted_at": None}

    def test_caller_deleted_at_is_overwritten(self):
        merged = merge_filter(Filter(filter={"deleted_at": {"$ne": None}}))
        assert merged.filter["deleted_at"] is None

    def test_regex_replaces_literal_value(self):
        merged = merge_filter(Filter(filter={"name": "exact", "size": 3}, regex_filter={"name": "^wid"}))
        assert merged.filter["name"] == {"$regex": "^wid", "$options": "i"}
        assert merged.filter["size"] == 3

    def test_idempotent(self):
        source = Filter(
            filter={"color": "red", "deleted_at": "x"},
            regex_filter={"name": "gad"},
            sort_by="size",
            sort_mode=DESCENDING,
            skip=2,
            limit=5,
        )
        once = merge_filter(source)
        assert merge_filter(once) == once

    def test_input_not_mutated(self):
        source = Filter(filter={"name": "a"}, regex_filter={"color": "re"})
        merge_filter(source)
        assert source.filter == {"name": "a"}

    def test_with_deleted_keeps_caller_value(self):
        merged = merge_filter(Filter(filter={"deleted_at": {"$ne": None}}, with_deleted=True))
        assert merged.filter == {"deleted_at": {"$ne": None}}

    def test_accepts_mapping_and_none(self):
        assert merge_filter({"name": "a"}).filter == {"name": "a", "deleted_at": None}
        assert merge_filter(None).filter == {"deleted_at": None}

    def test_options_pass_through(self):
        merged = merge_filter(Filter(sort_by="name", sort_mode=DESCENDING, skip=1, limit=10))
        assert (merged.sort_by, merged.sort_mode, merged.skip, merged.limit) == ("name", -1, 1, 10)


class TestFindOptions:
    """Test sort/skip/limit translation."""

    def test_nothing_set(self):
        assert find_options(Filter()) == {}
        assert sort_spec(Filter(sort_mode=-1)) is None

    def test_sort_defaults_to_ascending(self):
        assert find_options(Filter(sort_by="name")) == {"sort": [("name", 1)]}

    def test_explicit_sort_mode_honored(self):
        assert sort_spec(Filter(sort_by="size", sort_mode=-1)) == [("size", -1)]

    def test_skip_and_limit(self):
        options = find_options(Filter(skip=0, limit=3))
        assert options == {"skip": 0, "limit": 3}

    def test_limit_left_out_for_single_document_reads(self):
        assert find_options(Filter(skip=4, limit=3), with_limit=False) == {"skip": 4}
