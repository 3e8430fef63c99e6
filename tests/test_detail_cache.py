"""Tests for DetailCache in profile_compare/comparison/detail_cache.py."""

from __future__ import annotations

import logging

from conftest import FakeComparisonService, run, settle

from profile_compare.comparison.detail_cache import DetailCache


def make_cache(service: FakeComparisonService) -> DetailCache:
    return DetailCache(service.fetch_field_comparison, ("00e1", "00e2"))


class TestToggle:
    """Tests for expand and collapse."""

    def test_starts_collapsed(self, fake_service):
        """Unknown keys are collapsed, not loading and not cached."""
        cache = make_cache(fake_service)
        assert not cache.is_expanded("Account")
        assert not cache.is_loading("Account")
        assert not cache.is_cached("Account")
        assert cache.detail_for("Account") == ()

    def test_expand_fetches_once(self, fake_service):
        """The first expand dispatches a fetch and stores the rows."""

        async def scenario():
            cache = make_cache(fake_service)
            task = cache.toggle("Account")
            assert task is not None
            assert cache.is_expanded("Account")
            assert cache.is_loading("Account")
            await task
            return cache

        cache = run(scenario())
        assert not cache.is_loading("Account")
        assert [row.key for row in cache.detail_for("Account")] == [
            "Account.Rating",
            "Account.Name",
        ]
        assert fake_service.detail_calls == [("00e1", "00e2", "Account")]

    def test_toggle_cycles_fetch_at_most_once(self, fake_service):
        """Collapsing and re-expanding never fetches again."""

        async def scenario():
            cache = make_cache(fake_service)
            await cache.toggle("Account")
            for _ in range(4):
                assert cache.toggle("Account") is None
            await settle()
            return cache

        cache = run(scenario())
        assert cache.is_expanded("Account")
        assert cache.fetch_count == 1
        assert len(fake_service.detail_calls) == 1

    def test_collapse_keeps_cache(self, fake_service):
        """Collapsing a row keeps its cached detail."""

        async def scenario():
            cache = make_cache(fake_service)
            await cache.toggle("Account")
            cache.toggle("Account")
            return cache

        cache = run(scenario())
        assert not cache.is_expanded("Account")
        assert cache.is_cached("Account")
        assert len(cache.detail_for("Account")) == 2

    def test_rapid_toggle_while_loading(self, fake_service):
        """Re-expanding during a fetch reuses the in-flight task."""

        async def scenario():
            cache = make_cache(fake_service)
            gate = fake_service.gate("Account")
            first = cache.toggle("Account")
            assert cache.toggle("Account") is None  # collapse
            second = cache.toggle("Account")
            assert second is first
            assert cache.is_loading("Account")
            gate.set()
            await first
            return cache

        cache = run(scenario())
        assert cache.fetch_count == 1
        assert len(fake_service.detail_calls) == 1
        assert cache.is_expanded("Account")

    def test_loading_and_cached_never_both(self, fake_service):
        """A key is never loading and cached at the same time."""

        async def scenario():
            cache = make_cache(fake_service)
            gate = fake_service.gate("Account")
            task = cache.toggle("Account")
            await settle()
            observed = [(cache.is_loading("Account"), cache.is_cached("Account"))]
            gate.set()
            await task
            observed.append((cache.is_loading("Account"), cache.is_cached("Account")))
            return observed

        assert run(scenario()) == [(True, False), (False, True)]

    def test_concurrent_keys(self, fake_service, account_fields):
        """Fetches for different keys run independently."""
        fake_service.details["Contact"] = [
            {"fieldName": "Contact.Email", "isDifferent": False},
        ]

        async def scenario():
            cache = make_cache(fake_service)
            account_gate = fake_service.gate("Account")
            account = cache.toggle("Account")
            contact = cache.toggle("Contact")
            await contact
            assert cache.is_loading("Account")
            assert not cache.is_loading("Contact")
            account_gate.set()
            await account
            return cache

        cache = run(scenario())
        assert len(cache.detail_for("Account")) == len(account_fields)
        assert [row.key for row in cache.detail_for("Contact")] == ["Contact.Email"]
        assert cache.fetch_count == 2


class TestFetchResults:
    """Tests for empty and failed fetches."""

    def test_empty_result_is_cached(self, fake_service):
        """A fetch with no rows is cached and not refetched."""

        async def scenario():
            cache = make_cache(fake_service)
            await cache.toggle("Contact")
            cache.toggle("Contact")
            cache.toggle("Contact")
            return cache

        cache = run(scenario())
        assert cache.is_cached("Contact")
        assert cache.detail_for("Contact") == ()
        assert len(fake_service.detail_calls) == 1

    def test_failure_is_absorbed(self, fake_service, caplog):
        """A failed fetch is logged and stored as an empty result."""
        fake_service.details["Account"] = RuntimeError("boom")

        async def scenario():
            cache = make_cache(fake_service)
            await cache.toggle("Account")
            return cache

        with caplog.at_level(logging.WARNING):
            cache = run(scenario())

        assert not cache.is_loading("Account")
        assert cache.is_cached("Account")
        assert cache.detail_for("Account") == ()
        assert "Error loading detail for Account" in caplog.text

    def test_failure_is_not_retried(self, fake_service):
        """A failed key stays cached as empty for the session."""
        fake_service.details["Account"] = RuntimeError("boom")

        async def scenario():
            cache = make_cache(fake_service)
            await cache.toggle("Account")
            cache.toggle("Account")
            assert cache.toggle("Account") is None
            return cache

        run(scenario())
        assert len(fake_service.detail_calls) == 1


class TestReset:
    """Tests for session reset."""

    def test_reset_clears_state(self, fake_service):
        """reset drops expansion, cache and counts."""

        async def scenario():
            cache = make_cache(fake_service)
            await cache.toggle("Account")
            cache.reset(("00e1", "00e3"))
            return cache

        cache = run(scenario())
        assert not cache.is_expanded("Account")
        assert not cache.is_cached("Account")
        assert cache.fetch_count == 0
        assert cache.profile_ids == ("00e1", "00e3")

    def test_reset_keeps_profile_ids_by_default(self, fake_service):
        """reset without ids keeps the current pair."""
        cache = make_cache(fake_service)
        cache.reset()
        assert cache.profile_ids == ("00e1", "00e2")

    def test_new_session_fetches_with_new_ids(self, fake_service):
        """After reset the next expand fetches again with the new pair."""

        async def scenario():
            cache = make_cache(fake_service)
            await cache.toggle("Account")
            cache.reset(("00e1", "00e3"))
            await cache.toggle("Account")

        run(scenario())
        assert fake_service.detail_calls == [
            ("00e1", "00e2", "Account"),
            ("00e1", "00e3", "Account"),
        ]

    def test_stale_result_is_discarded(self, fake_service):
        """A fetch finishing after reset does not populate the new session."""

        async def scenario():
            cache = make_cache(fake_service)
            gate = fake_service.gate("Account")
            cache.toggle("Account")
            await settle()
            cache.reset(("00e1", "00e3"))
            gate.set()
            await cache.wait_pending()
            return cache

        cache = run(scenario())
        assert not cache.is_cached("Account")
        assert not cache.is_loading("Account")
        assert not cache.is_expanded("Account")

    def test_wait_pending_without_tasks(self, fake_service):
        """wait_pending returns immediately when nothing is in flight."""
        cache = make_cache(fake_service)
        run(cache.wait_pending())
        assert cache.fetch_count == 0


class TestResolve:
    """Tests for calling resolve directly."""

    def test_resolve_stores_rows(self, fake_service):
        """resolve fetches and stores without touching expansion."""
        cache = make_cache(fake_service)
        run(cache.resolve("Account"))
        assert cache.is_cached("Account")
        assert not cache.is_expanded("Account")
        assert not cache.is_loading("Account")

    def test_resolve_without_profile_ids(self):
        """Without a profile pair the fetch receives None ids."""
        service = FakeComparisonService()
        cache = DetailCache(service.fetch_field_comparison)
        run(cache.resolve("Account"))
        assert service.detail_calls == [(None, None, "Account")]


def test_toggle_needs_running_loop_only_to_fetch(fake_service):
    """Collapsing and cached expands work without an event loop."""

    async def fill():
        cache = make_cache(fake_service)
        await cache.toggle("Account")
        return cache

    cache = run(fill())
    assert cache.toggle("Account") is None
    assert cache.toggle("Account") is None
    assert cache.is_expanded("Account")
