#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
    tests.test_db
    ~~~~~~~~~~~~~

    Schema creation at startup.
"""

import pytest
from sqlalchemy import inspect
from sqlalchemy.exc import OperationalError
from bibliolend.core import db


def test_init_creates_schema(tmp_path):
    engine = db.make_engine(f"sqlite:///{tmp_path / 'fresh.db'}")
    try:
        assert db.init(engine) is engine
        tables = set(inspect(engine).get_table_names())
        assert {"borrowers", "copies", "loans", "sanctions"} <= tables
    finally:
        engine.dispose()


def test_init_failure_stops_startup(tmp_path):
    engine = db.make_engine(f"sqlite:///{tmp_path / 'missing' / 'lending.db'}")
    try:
        with pytest.raises(OperationalError):
            db.init(engine)
    finally:
        engine.dispose()
