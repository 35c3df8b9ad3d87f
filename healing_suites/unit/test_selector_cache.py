from healing_suites.ui_testing.framework.selector_cache import InMemorySelectorCache


def test_set_get_overwrite_and_evict():
    cache = InMemorySelectorCache()
    assert cache.get("login_button") is None

    cache.set("login_button", "button.login")
    cache.set("login_button", "button.sign-in")
    assert cache.get("login_button") == "button.sign-in"
    assert "login_button" in cache
    assert len(cache) == 1

    cache.evict("login_button")
    cache.evict("login_button")
    assert "login_button" not in cache


def test_snapshot_and_clear():
    cache = InMemorySelectorCache()
    cache.set("a", "#a")
    cache.set("b", "#b")

    snapshot = cache.snapshot()
    cache.clear()

    assert snapshot == {"a": "#a", "b": "#b"}
    assert len(cache) == 0
