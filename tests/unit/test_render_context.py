"""Tests for per-render state held in a ContextVar."""

import pytest

from stache import TemplateRuntimeError
from stache.render_context import (
    RenderContext,
    get_render_context,
    render_context,
    reset_render_context,
    set_render_context,
)


class TestRenderContext:
    def test_defaults(self):
        ctx = RenderContext()
        assert ctx.partial_depth == 0
        assert ctx.partial_stack == []
        assert ctx.max_partial_depth is None

    def test_child_context(self):
        ctx = RenderContext(template_name="page", max_partial_depth=5)
        child = ctx.child_context("header").child_context("logo")
        assert child.partial_depth == 2
        assert child.partial_stack == ["header", "logo"]
        assert child.template_name == "page"
        assert child.max_partial_depth == 5
        assert ctx.partial_stack == []

    def test_unlimited_depth(self):
        RenderContext(partial_depth=10_000).check_partial_depth("p")

    def test_depth_exceeded(self):
        ctx = RenderContext(partial_depth=2, max_partial_depth=2, partial_stack=["a", "b"])
        with pytest.raises(TemplateRuntimeError) as exc_info:
            ctx.check_partial_depth("c")
        error = exc_info.value
        assert error.partial_stack == ["a", "b", "c"]
        assert "Partial stack:" in str(error)
        assert "Suggestion:" in str(error)


class TestContextVar:
    def test_render_context_manager(self):
        assert get_render_context() is None
        with render_context(template_name="page") as ctx:
            assert get_render_context() is ctx
            assert ctx.template_name == "page"
        assert get_render_context() is None

    def test_restored_after_error(self):
        with pytest.raises(ValueError):
            with render_context():
                raise ValueError("boom")
        assert get_render_context() is None

    def test_set_and_reset(self):
        token = set_render_context(RenderContext(template_name="x"))
        try:
            assert get_render_context().template_name == "x"
        finally:
            reset_render_context(token)
        assert get_render_context() is None

