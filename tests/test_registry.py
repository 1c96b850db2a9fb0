#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
    tests.test_registry
    ~~~~~~~~~~~~~~~~~~~

    Copy status transitions.
"""

import pytest
from bibliolend.core.models import CopyStatus
from bibliolend.core.registry import CopyRegistry, ReserveResult, ReleaseResult


@pytest.fixture
def registry(db_session):
    return CopyRegistry(db_session)


def test_new_copies_are_free(registry):
    copy = registry.add("B-2", book_id=7)
    assert copy.status is CopyStatus.FREE
    assert registry.status_of(copy.id) is CopyStatus.FREE


def test_reserve_free_copy(registry):
    copy = registry.add("B-2", book_id=7)
    assert registry.try_reserve(copy.id) is ReserveResult.RESERVED
    assert registry.status_of(copy.id) is CopyStatus.LOANED


def test_reserve_loaned_copy(registry):
    copy = registry.add("B-2", book_id=7)
    registry.try_reserve(copy.id)
    assert registry.try_reserve(copy.id) is ReserveResult.ALREADY_RESERVED
    assert registry.status_of(copy.id) is CopyStatus.LOANED


def test_reserve_unknown_copy(registry):
    assert registry.try_reserve(999) is ReserveResult.NOT_FOUND
    assert registry.status_of(999) is None


def test_release(registry):
    copy = registry.add("B-2", book_id=7)
    registry.try_reserve(copy.id)
    assert registry.release(copy.id) is ReleaseResult.RELEASED
    assert registry.status_of(copy.id) is CopyStatus.FREE


def test_release_free_copy_is_a_noop(registry):
    copy = registry.add("B-2", book_id=7)
    before = registry.get(copy.id).updated_at
    assert registry.release(copy.id) is ReleaseResult.RELEASED
    assert registry.status_of(copy.id) is CopyStatus.FREE
    assert registry.get(copy.id).updated_at == before


def test_release_unknown_copy(registry):
    assert registry.release(999) is ReleaseResult.NOT_FOUND


def test_free_copies(registry):
    a = registry.add("A-1", book_id=1)
    b = registry.add("A-2", book_id=1)
    c = registry.add("C-1", book_id=2)
    registry.try_reserve(b.id)
    assert [x.id for x in registry.free_copies()] == [a.id, c.id]
    assert [x.id for x in registry.free_copies(book_id=1)] == [a.id]
