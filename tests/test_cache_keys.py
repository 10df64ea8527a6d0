from antlyst.main import _cache_key


def test_cache_key_stable() -> None:
    key = _cache_key("hashabc", "dashboard", "powerbi")
    assert key == "cache:v1:hashabc:dashboard:powerbi"


def test_cache_key_default_params() -> None:
    assert _cache_key("hashabc", "manifest") == "cache:v1:hashabc:manifest:default"
