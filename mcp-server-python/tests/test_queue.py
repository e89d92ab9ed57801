"""
Unit tests for the FIFO queue used by the flow traversal.
"""

from utils.queue import Queue


class TestQueue:
    """Tests for Queue."""

    def test_new_queue_is_empty(self):
        """Test that a new queue has no items."""
        queue = Queue()
        assert queue.is_empty is True
        assert len(queue) == 0

    def test_dequeue_empty_returns_none(self):
        """Test that dequeue on an empty queue signals empty with None."""
        queue = Queue()
        assert queue.dequeue() is None
        assert queue.is_empty is True

    def test_fifo_order(self):
        """Test that items come out in the order they went in."""
        queue = Queue()
        for value in ["a", "b", "c"]:
            queue.enqueue(value)

        assert [queue.dequeue(), queue.dequeue(), queue.dequeue()] == ["a", "b", "c"]
        assert queue.is_empty is True

    def test_length_tracks_enqueue_and_dequeue(self):
        """Test that len reflects the current count."""
        queue = Queue()
        queue.enqueue(1)
        queue.enqueue(2)
        assert len(queue) == 2
        queue.dequeue()
        assert len(queue) == 1
        assert queue.is_empty is False

    def test_reuse_after_draining(self):
        """Test that the queue works again after being emptied."""
        queue = Queue()
        queue.enqueue("first")
        assert queue.dequeue() == "first"
        assert queue.dequeue() is None

        queue.enqueue("second")
        queue.enqueue("third")
        assert queue.dequeue() == "second"
        assert queue.dequeue() == "third"
        assert queue.is_empty is True

    def test_interleaved_operations(self):
        """Test interleaving enqueue and dequeue keeps FIFO order."""
        queue = Queue()
        queue.enqueue(1)
        queue.enqueue(2)
        assert queue.dequeue() == 1
        queue.enqueue(3)
        assert queue.dequeue() == 2
        assert queue.dequeue() == 3
        assert queue.dequeue() is None

    def test_holds_arbitrary_objects(self):
        """Test that payloads are returned as the same objects."""
        payload = {"key": "value"}
        queue = Queue()
        queue.enqueue(payload)
        assert queue.dequeue() is payload
