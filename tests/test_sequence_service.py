# tests/test_sequence_service.py
"""Tests for the sequence allocator (uniqueness, monotonicity, concurrency)."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from app.config import settings
from app.database import run_transaction
from app.exceptions import NotFoundError
from app.services.sequence_service import Allocator, CounterAllocator, allocator


class TestSequenceAllocator:
    def test_first_allocation_is_one(self, db):
        value = run_transaction(db, lambda s: allocator.next_id(s, "user_seq"))
        assert value == 1

    def test_allocations_strictly_increase(self, db):
        values = [run_transaction(db, lambda s: allocator.next_id(s, "delivery_seq")) for _ in range(5)]
        assert values == [1, 2, 3, 4, 5]
        assert allocator.current(db, "delivery_seq") == 5

    def test_sequences_are_independent(self, db):
        run_transaction(db, lambda s: allocator.next_id(s, "user_seq"))
        run_transaction(db, lambda s: allocator.next_id(s, "user_seq"))
        assert run_transaction(db, lambda s: allocator.next_id(s, "address_seq")) == 1
        assert allocator.current(db, "user_seq") == 2

    def test_two_allocations_in_one_transaction(self, db):
        pair = run_transaction(db, lambda s: (allocator.next_id(s, "assi_seq"), allocator.next_id(s, "assi_seq")))
        assert pair == (1, 2)

    def test_rolled_back_transaction_does_not_consume_id(self, db):
        def _work(s):
            allocator.next_id(s, "user_seq")
            raise NotFoundError("nope")

        with pytest.raises(NotFoundError):
            run_transaction(db, _work)
        assert allocator.current(db, "user_seq") == 0

    def test_standalone_allocate(self, session_factory, db):
        alloc = CounterAllocator(session_factory)
        assert alloc.allocate("rider_seq") == 1
        assert alloc.allocate("rider_seq") == 2
        assert allocator.current(db, "rider_seq") == 2

    def test_concurrent_burst_yields_contiguous_run(self, session_factory, db, monkeypatch):
        monkeypatch.setattr(settings, "TRANSACTION_MAX_ATTEMPTS", 100)
        alloc = CounterAllocator(session_factory)
        alloc.allocate("user_seq")
        alloc.allocate("user_seq")     # high-water mark = 2

        n = 8
        barrier = threading.Barrier(n)

        def _one(_):
            barrier.wait()
            return alloc.allocate("user_seq")

        with ThreadPoolExecutor(max_workers=n) as pool:
            values = list(pool.map(_one, range(n)))

        assert len(set(values)) == n
        assert sorted(values) == list(range(3, 3 + n))
        assert allocator.current(db, "user_seq") == 2 + n


class TestAllocatorInterface:
    def test_interface_cannot_be_instantiated(self):
        with pytest.raises(TypeError):
            Allocator()

    def test_partial_implementation_is_rejected(self):
        class OnlyNextId(Allocator):
            def next_id(self, db, sequence_name):
                return 1

        with pytest.raises(TypeError):
            OnlyNextId()

    def test_counter_allocator_is_an_allocator(self):
        assert isinstance(allocator, Allocator)
