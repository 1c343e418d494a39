from types import SimpleNamespace

import pytest


class FakeQuery:
    """Chainable stand-in for the Supabase query builder backed by a list of rows."""

    def __init__(self, store, table):
        self.store = store
        self.table = table
        self.filters = []
        self.row_limit = None
        self.pending_insert = None
        self.negate_next = False

    def select(self, *args, **kwargs):
        return self

    def _add_filter(self, predicate):
        if self.negate_next:
            self.negate_next = False
            self.filters.append(lambda row: not predicate(row))
        else:
            self.filters.append(predicate)
        return self

    def eq(self, column, value):
        return self._add_filter(lambda row: row.get(column) == value)

    def in_(self, column, values):
        return self._add_filter(lambda row: row.get(column) in values)

    def is_(self, column, value):
        assert value == "null"
        return self._add_filter(lambda row: row.get(column) is None)

    @property
    def not_(self):
        self.negate_next = True
        return self

    def order(self, *args, **kwargs):
        return self

    def limit(self, count):
        self.row_limit = count
        return self

    def insert(self, record):
        self.pending_insert = record
        return self

    def execute(self):
        if self.store.error is not None:
            raise self.store.error
        rows = self.store.tables.setdefault(self.table, [])
        if self.pending_insert is not None:
            row = {"id": f"{self.table}-{len(rows) + 1}", **self.pending_insert}
            rows.append(row)
            return SimpleNamespace(data=[row], count=None)
        matched = [row for row in rows if all(predicate(row) for predicate in self.filters)]
        if self.row_limit is not None:
            matched = matched[: self.row_limit]
        return SimpleNamespace(data=matched, count=len(matched))


class FakeSupabase:
    def __init__(self, tables=None):
        self.tables = tables or {}
        self.error = None

    def table(self, name):
        return FakeQuery(self, name)


@pytest.fixture
def fake_supabase():
    return FakeSupabase()
