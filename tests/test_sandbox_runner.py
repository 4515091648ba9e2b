"""Tests for running descrambler recipes in a script sandbox.

Fake sandboxes cover the runner's contract; the yt-dlp backed sandbox is
exercised on the synthetic player script from conftest.
"""

from __future__ import annotations

import importlib.util
import sys

import pytest

from yt_resolve.core.fragment_extractor import build_recipe
from yt_resolve.core.models import CipherRecipe
from yt_resolve.core.sandbox_runner import run_recipe
from yt_resolve.exceptions import (
    EnvironmentError,
    SandboxInvocationError,
    SandboxLoadError,
)

requires_ytdlp = pytest.mark.skipif(
    importlib.util.find_spec("yt_dlp") is None,
    reason="yt-dlp not installed",
)


class RecordingSandbox:
    """Reverses its argument and records what it was given."""

    instances: list[RecordingSandbox] = []

    def __init__(self) -> None:
        self.loaded: list[str] = []
        self.calls: list[tuple[str, str]] = []
        RecordingSandbox.instances.append(self)

    def evaluate(self, source: str) -> None:
        self.loaded.append(source)

    def call(self, function_name: str, argument: str) -> object:
        self.calls.append((function_name, argument))
        return argument[::-1]


def _recipe(**overrides: object) -> CipherRecipe:
    defaults: dict[str, object] = {
        "function_name": "Xy",
        "helper_name": "Hq",
        "function_source": "var Xy=function(a){};",
        "helper_source": "var Hq={};",
    }
    defaults.update(overrides)
    return CipherRecipe(**defaults)  # type: ignore[arg-type]


@pytest.fixture(autouse=True)
def _reset_instances() -> None:
    RecordingSandbox.instances.clear()


# ---------------------------------------------------------------------------
# run_recipe with fakes
# ---------------------------------------------------------------------------

class TestRunRecipe:
    def test_helper_loaded_before_function(self) -> None:
        assert run_recipe(_recipe(), "AABB", RecordingSandbox) == "BBAA"

        (sandbox,) = RecordingSandbox.instances
        assert sandbox.loaded == ["var Hq={};", "var Xy=function(a){};"]
        assert sandbox.calls == [("Xy", "AABB")]

    def test_empty_helper_is_not_loaded(self) -> None:
        run_recipe(_recipe(helper_name=None, helper_source=""), "x", RecordingSandbox)
        assert RecordingSandbox.instances[0].loaded == ["var Xy=function(a){};"]

    def test_fresh_sandbox_per_call(self) -> None:
        recipe = _recipe()
        run_recipe(recipe, "ab", RecordingSandbox)
        run_recipe(recipe, "cd", RecordingSandbox)
        assert len(RecordingSandbox.instances) == 2
        assert RecordingSandbox.instances[1].calls == [("Xy", "cd")]

    def test_signature_with_quotes_is_passed_verbatim(self) -> None:
        signature = "a\"b'c\\d"
        assert run_recipe(_recipe(), signature, RecordingSandbox) == signature[::-1]

    def test_non_string_result_raises(self) -> None:
        class NumberSandbox(RecordingSandbox):
            def call(self, function_name: str, argument: str) -> object:
                return 42

        with pytest.raises(SandboxInvocationError, match="int"):
            run_recipe(_recipe(), "x", NumberSandbox)

    def test_foreign_load_error_is_wrapped(self) -> None:
        class BrokenSandbox(RecordingSandbox):
            def evaluate(self, source: str) -> None:
                raise ValueError("syntax")

        with pytest.raises(SandboxLoadError) as exc_info:
            run_recipe(_recipe(), "x", BrokenSandbox)
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_foreign_call_error_is_wrapped(self) -> None:
        class ThrowingSandbox(RecordingSandbox):
            def call(self, function_name: str, argument: str) -> object:
                raise RuntimeError("TypeError: undefined")

        with pytest.raises(SandboxInvocationError, match="Xy"):
            run_recipe(_recipe(), "x", ThrowingSandbox)

    def test_factory_failure_becomes_load_error(self) -> None:
        def unavailable() -> RecordingSandbox:
            raise EnvironmentError("yt-dlp is not installed.", hint="pip install yt-dlp")

        with pytest.raises(SandboxLoadError, match="yt-dlp is not installed") as exc_info:
            run_recipe(_recipe(), "x", unavailable)
        assert exc_info.value.hint == "pip install yt-dlp"
        assert isinstance(exc_info.value.__cause__, EnvironmentError)

    def test_typed_errors_pass_through(self) -> None:
        original = SandboxLoadError("bad fragment")

        class TypedSandbox(RecordingSandbox):
            def evaluate(self, source: str) -> None:
                raise original

        with pytest.raises(SandboxLoadError) as exc_info:
            run_recipe(_recipe(), "x", TypedSandbox)
        assert exc_info.value is original


# ---------------------------------------------------------------------------
# yt-dlp backed sandbox
# ---------------------------------------------------------------------------

@requires_ytdlp
class TestJsInterpreterSandbox:
    def test_descrambles_synthetic_player(self, player_script: str) -> None:
        from yt_resolve.infra.jsinterp_sandbox import JsInterpreterSandbox

        recipe = build_recipe(player_script)
        assert run_recipe(recipe, "abcdefgh", JsInterpreterSandbox) == "efgdcba"

    def test_result_is_repeatable(self, player_script: str) -> None:
        from yt_resolve.infra.jsinterp_sandbox import JsInterpreterSandbox

        recipe = build_recipe(player_script)
        first = run_recipe(recipe, "0123456789", JsInterpreterSandbox)
        assert run_recipe(recipe, "0123456789", JsInterpreterSandbox) == first

    def test_non_string_return_raises(self) -> None:
        from yt_resolve.infra.jsinterp_sandbox import JsInterpreterSandbox

        recipe = CipherRecipe(
            function_name="Zz",
            helper_name=None,
            function_source='var Zz=function(a){a=a.split("");return a.length};',
        )
        with pytest.raises(SandboxInvocationError):
            run_recipe(recipe, "abc", JsInterpreterSandbox)

    def test_non_declaration_is_rejected(self) -> None:
        from yt_resolve.infra.jsinterp_sandbox import JsInterpreterSandbox

        with pytest.raises(SandboxLoadError):
            JsInterpreterSandbox().evaluate("alert(1)")

    def test_truncated_object_is_rejected(self) -> None:
        from yt_resolve.infra.jsinterp_sandbox import JsInterpreterSandbox

        with pytest.raises(SandboxLoadError):
            JsInterpreterSandbox().evaluate("var Hq={rv:function(a){a.reverse()}")

    def test_call_before_load_raises(self) -> None:
        from yt_resolve.infra.jsinterp_sandbox import JsInterpreterSandbox

        with pytest.raises(SandboxInvocationError):
            JsInterpreterSandbox().call("Xy", "abc")

    def test_missing_helper_fails_at_call(self) -> None:
        from yt_resolve.infra.jsinterp_sandbox import JsInterpreterSandbox

        sandbox = JsInterpreterSandbox()
        sandbox.evaluate('var Xy=function(a){a=a.split("");Gone.rv(a);return a.join("")};')
        with pytest.raises(SandboxInvocationError):
            sandbox.call("Xy", "abc")


def test_sandbox_requires_ytdlp(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setitem(sys.modules, "yt_dlp", None)
    monkeypatch.setitem(sys.modules, "yt_dlp.jsinterp", None)

    from yt_resolve.infra.jsinterp_sandbox import JsInterpreterSandbox

    with pytest.raises(EnvironmentError, match="yt-dlp is not installed"):
        JsInterpreterSandbox()
