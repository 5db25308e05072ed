"""
Shared fixtures: an in-memory stand-in for the Supabase client (table query
builder + auth) and a small mixed question pool.
"""
import itertools
from types import SimpleNamespace
from uuid import uuid4

import pytest

from src.models import question_from_record

_seq = itertools.count(1)


class FakeResponse:
    def __init__(self, data, count=None):
        self.data = data
        self.count = count


class FakeQuery:
    """Covers the subset of the PostgREST builder the app uses."""

    def __init__(self, client, table):
        self.client = client
        self.table_name = table
        self.op = "select"
        self.payload = None
        self.columns = None
        self.filters = []
        self.order_by = None
        self.limit_n = None

    def select(self, *columns, count=None):
        self.op = "select"
        self.columns = [c for c in columns if c != "*"] or None
        return self

    def insert(self, rows):
        self.op, self.payload = "insert", rows
        return self

    def update(self, row):
        self.op, self.payload = "update", row
        return self

    def delete(self):
        self.op = "delete"
        return self

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def order(self, column, desc=False):
        self.order_by = (column, desc)
        return self

    def limit(self, n):
        self.limit_n = n
        return self

    def _matches(self, row):
        return all(row.get(col) is not None and str(row.get(col)) == str(val) for col, val in self.filters)

    def execute(self):
        if self.client.fail:
            raise RuntimeError("backend unavailable")
        self.client.calls.append((self.table_name, self.op))
        rows = self.client.tables.setdefault(self.table_name, [])

        if self.op == "insert":
            new = self.payload if isinstance(self.payload, list) else [self.payload]
            created = []
            for item in new:
                row = dict(item)
                if self.table_name != "profiles":
                    row.setdefault("id", str(uuid4()))
                row.setdefault("created_at", next(_seq))
                rows.append(row)
                created.append(dict(row))
            return FakeResponse(created)

        matched = [r for r in rows if self._matches(r)]
        if self.op == "update":
            for r in matched:
                r.update(self.payload)
            return FakeResponse([dict(r) for r in matched])
        if self.op == "delete":
            self.client.tables[self.table_name] = [r for r in rows if r not in matched]
            return FakeResponse([dict(r) for r in matched])

        if self.order_by:
            col, desc = self.order_by
            present = [r for r in matched if r.get(col) is not None]
            missing = [r for r in matched if r.get(col) is None]
            matched = sorted(present, key=lambda r: r[col], reverse=desc) + missing
        if self.limit_n is not None:
            matched = matched[: self.limit_n]
        if self.columns:
            matched = [{c: r.get(c) for c in self.columns} for r in matched]
        else:
            matched = [dict(r) for r in matched]
        return FakeResponse(matched, count=len(matched))


class FakeAuth:
    def __init__(self):
        self.users = {}
        self.signed_out = False

    def sign_up(self, credentials):
        uid = str(uuid4())
        name = credentials.get("options", {}).get("data", {}).get("name", "")
        self.users[credentials["email"]] = (credentials["password"], uid, name)
        return self._response(credentials["email"])

    def sign_in_with_password(self, credentials):
        stored = self.users.get(credentials["email"])
        if not stored or stored[0] != credentials["password"]:
            raise RuntimeError("Invalid login credentials")
        return self._response(credentials["email"])

    def sign_out(self, options=None):
        self.signed_out = True
        self.sign_out_options = options

    def _response(self, email):
        _, uid, name = self.users[email]
        user = SimpleNamespace(id=uid, email=email, user_metadata={"name": name})
        return SimpleNamespace(user=user, session=SimpleNamespace(access_token="token"))


class FakeSupabase:
    def __init__(self, fail=False):
        self.tables = {}
        self.calls = []
        self.fail = fail
        self.auth = FakeAuth()

    def table(self, name):
        return FakeQuery(self, name)


@pytest.fixture
def fake_client():
    return FakeSupabase()


@pytest.fixture
def failing_client():
    return FakeSupabase(fail=True)


@pytest.fixture
def client_factory():
    """Stands in for creating a new Supabase client from the environment."""
    return FakeSupabase


@pytest.fixture
def question_rows():
    """One question of each type, as stored rows."""
    return [
        {"id": "q-mcq", "type": "mcq", "text": "2 + 2 = ?", "options": ["3", "4", "5"], "answer": 1},
        {"id": "q-tf", "type": "truefalse", "text": "The sky is blue.", "options": ["True", "False"], "answer": True},
        {"id": "q-short", "type": "short", "text": "Capital of France?", "answer": "Paris", "explanation": "Paris is the capital."},
        {"id": "q-drag", "type": "drag", "text": "Order the numbers.", "options": ["one", "two", "three"], "answer": ["one", "two", "three"]},
    ]


@pytest.fixture
def question_pool(question_rows):
    return [question_from_record(r) for r in question_rows]
