import time
import pytest

from cyberlearn.core.cache import MemorySessionBackend, QuizSessionStore


@pytest.mark.asyncio
async def test_save_and_load_round_trip():
    store = QuizSessionStore(MemorySessionBackend(), ttl=60)

    assert await store.save("abc", {"current_index": 1, "answered": [0]})
    assert await store.load("abc") == {"current_index": 1, "answered": [0]}
    assert await store.load("missing") is None


@pytest.mark.asyncio
async def test_expired_sessions_are_gone(monkeypatch):
    store = QuizSessionStore(MemorySessionBackend(), ttl=10)
    await store.save("abc", {"current_index": 0})

    now = time.time()
    monkeypatch.setattr("cyberlearn.core.cache.time.time", lambda: now + 11)

    assert await store.load("abc") is None


@pytest.mark.asyncio
async def test_discard_and_clear_only_touch_quiz_sessions():
    backend = MemorySessionBackend()
    store = QuizSessionStore(backend, ttl=0)
    await backend.write("other:1", {"keep": True}, 0)
    await store.save("a", {})
    await store.save("b", {})

    assert await store.discard("a") is True
    assert await store.discard("a") is False
    assert await store.clear() == 1
    assert await backend.read("other:1") == {"keep": True}
