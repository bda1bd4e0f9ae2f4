"""Tests for unlock session expiry."""

from concurrent.futures import ThreadPoolExecutor

from vault_core import SessionRegistry


KEY = b"k" * 32


class TestSessionTTL:
    """Sessions expire five minutes after unlock."""

    def test_available_just_before_expiry(self, sessions, clock):
        """Session is still there at 4m59s."""
        sessions.put("bob@example.com", KEY)
        clock.advance(4 * 60 + 59)
        assert sessions.get("bob@example.com") == KEY

    def test_gone_just_after_expiry(self, sessions, clock):
        """Session is gone at 5m01s and evicted."""
        sessions.put("bob@example.com", KEY)
        clock.advance(5 * 60 + 1)
        assert sessions.get("bob@example.com") is None
        assert len(sessions) == 0

    def test_access_does_not_extend(self, sessions, clock):
        """Reading a session does not refresh its expiry."""
        sessions.put("bob@example.com", KEY)
        clock.advance(240)
        assert sessions.get("bob@example.com") == KEY
        clock.advance(61)
        assert sessions.get("bob@example.com") is None

    def test_put_restarts_session(self, sessions, clock):
        """Unlocking again starts a new five minutes."""
        sessions.put("bob@example.com", KEY)
        clock.advance(240)
        sessions.put("bob@example.com", KEY)
        clock.advance(240)
        assert sessions.get("bob@example.com") == KEY

    def test_identities_are_separate(self, sessions):
        """Each caller has their own session."""
        sessions.put("bob@example.com", KEY)
        assert sessions.get("alice@example.com") is None
        assert "bob@example.com" in sessions
        assert "alice@example.com" not in sessions


class TestSessionRemoval:
    """Test explicit lock, sweep and clear."""

    def test_remove_is_idempotent(self, sessions):
        """Removing twice never errors."""
        sessions.put("bob@example.com", KEY)
        assert sessions.remove("bob@example.com") is True
        assert sessions.remove("bob@example.com") is False
        assert sessions.get("bob@example.com") is None

    def test_sweep_evicts_only_expired(self, sessions, clock):
        """sweep drops expired sessions and keeps live ones."""
        sessions.put("old@example.com", KEY)
        clock.advance(200)
        sessions.put("new@example.com", KEY)
        clock.advance(150)
        assert sessions.sweep() == 1
        assert len(sessions) == 1
        assert sessions.get("new@example.com") == KEY

    def test_clear(self, sessions):
        """clear drops everything."""
        sessions.put("a@example.com", KEY)
        sessions.put("b@example.com", KEY)
        sessions.clear()
        assert len(sessions) == 0

    def test_concurrent_access(self):
        """Parallel puts and gets from many callers stay consistent."""
        registry = SessionRegistry(ttl_seconds=300)

        def worker(n):
            identity = f"user{n}@example.com"
            registry.put(identity, bytes([n]) * 32)
            return registry.get(identity)

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(worker, range(50)))

        assert results == [bytes([n]) * 32 for n in range(50)]
        assert len(registry) == 50
