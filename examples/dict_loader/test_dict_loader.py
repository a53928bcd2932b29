"""Tests for the dict_loader example."""


class TestDictLoaderApp:
    """Verify in-memory partials render through the environment loader."""

    def test_title(self, example_app) -> None:
        assert "<title>In-Memory Partials</title>" in example_app.output

    def test_paragraphs(self, example_app) -> None:
        assert "    <p>No filesystem needed.</p>\n" in example_app.output
        assert "    <p>Partials resolve through the loader.</p>\n" in example_app.output

    def test_partial_is_indented(self, example_app) -> None:
        assert "\n  <nav>\n" in example_app.output
        assert '\n    <a href="/docs">Docs</a>\n' in example_app.output
        assert "\n  </nav>\n" in example_app.output

    def test_standalone_tags_leave_no_blank_lines(self, example_app) -> None:
        assert "\n\n" not in example_app.output
