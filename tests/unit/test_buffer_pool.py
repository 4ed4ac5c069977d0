"""
Unit tests for the buffer pool.
"""

import io
import threading

import pytest

from httpencoder.core.buffer_pool import Buffer, BufferPool


class TestBuffer:
    def test_write_and_getvalue(self):
        buffer = Buffer()

        assert buffer.write(b"abc") == 3
        buffer.write(b"def")

        assert buffer.getvalue() == b"abcdef"
        assert len(buffer) == 6

    def test_read_from_stream(self):
        buffer = Buffer()
        data = b"x" * (Buffer.READ_CHUNK_SIZE * 2 + 17)

        assert buffer.read_from(io.BytesIO(data)) == len(data)
        assert buffer.getvalue() == data

    def test_read_from_propagates_errors(self, broken_stream):
        with pytest.raises(OSError):
            Buffer().read_from(broken_stream)

    def test_reset(self):
        buffer = Buffer()
        buffer.write(b"data")
        buffer.reset()

        assert len(buffer) == 0
        assert buffer.getvalue() == b""

    def test_getvalue_is_a_snapshot(self):
        buffer = Buffer()
        buffer.write(b"one")
        snapshot = buffer.getvalue()
        buffer.reset()

        assert snapshot == b"one"


class TestBufferPool:
    def test_get_creates_when_empty(self):
        pool = BufferPool()
        assert isinstance(pool.get(), Buffer)
        assert len(pool) == 0

    def test_put_resets_and_reuses(self):
        pool = BufferPool()
        buffer = pool.get()
        buffer.write(b"leftover")

        pool.put(buffer)

        assert len(pool) == 1
        reused = pool.get()
        assert reused is buffer
        assert len(reused) == 0

    def test_context_manager_releases(self):
        pool = BufferPool()

        with pool.buffer() as buffer:
            buffer.write(b"data")
            assert len(pool) == 0

        assert len(pool) == 1
        assert len(pool.get()) == 0

    def test_context_manager_releases_on_exception(self):
        pool = BufferPool()

        with pytest.raises(RuntimeError):
            with pool.buffer() as buffer:
                buffer.write(b"data")
                raise RuntimeError("boom")

        assert len(pool) == 1

    def test_nested_checkouts_are_distinct(self):
        pool = BufferPool()

        with pool.buffer() as first, pool.buffer() as second:
            assert first is not second

        assert len(pool) == 2

    def test_concurrent_use(self):
        """Buffers are never handed to two threads at once."""
        pool = BufferPool()
        seen = []
        collisions = []
        lock = threading.Lock()

        def worker():
            for _ in range(200):
                with pool.buffer() as buffer:
                    with lock:
                        if any(buffer is other for other in seen):
                            collisions.append(buffer)
                        seen.append(buffer)
                    buffer.write(b"x")
                    with lock:
                        seen.remove(buffer)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert collisions == []
        assert seen == []
        assert 1 <= len(pool) <= 8
