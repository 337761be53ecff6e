# tests/test_markdown_renderer.py
# Task note preview HTML

from ui.markdown_renderer import MarkdownRenderer, MarkdownTheme


class TestMarkdownRenderer:

    def test_checklists_become_boxes(self):
        md = MarkdownRenderer()
        out = md.preprocess("- [ ] todo\n- [x] done\n* [X] also")
        assert out.splitlines() == ["- ☐ todo", "- ☑ done", "* ☑ also"]

    def test_empty_note(self):
        assert MarkdownRenderer().preprocess("") == ""
        assert "<body></body>" in MarkdownRenderer().to_html(None)

    def test_renders_markdown(self):
        html = MarkdownRenderer().to_html("# Plan\n\n**focus** first")
        assert "<h1>Plan</h1>" in html
        assert "<strong>focus</strong>" in html

    def test_theme_in_css(self):
        html = MarkdownRenderer(MarkdownTheme(link="#FF0000")).to_html("[x](http://a)")
        assert "#FF0000" in html

    def test_strikethrough_and_bare_links(self):
        html = MarkdownRenderer().to_html("~~skip~~ see https://example.com")
        assert "<del>skip</del>" in html
        assert 'href="https://example.com"' in html
