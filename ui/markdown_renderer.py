# ui/markdown_renderer.py
# -*- coding: utf-8 -*-

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional

from markdown import markdown

_TASK_UNCHECKED = re.compile(r"^(\s*[-*+]\s+)\[ \]\s+")
_TASK_CHECKED = re.compile(r"^(\s*[-*+]\s+)\[(x|X)\]\s+")


@dataclass(frozen=True)
class MarkdownTheme:
    text: str = "#111827"
    muted: str = "#6B7280"
    border: str = "#E5E7EB"
    panel: str = "#FFFFFF"
    codebg: str = "#F3F4F6"
    link: str = "#2563EB"
    quote: str = "#3B82F6"


class MarkdownRenderer:
    """
    Task note preview: markdown -> HTML + CSS for tkinterweb.

    tkhtml has no <input>, so "- [ ]" / "- [x]" checklists are rewritten to
    unicode boxes before conversion.
    """

    EXTENSIONS = [
        "extra",
        "sane_lists",
        "nl2br",
        "admonition",
        "pymdownx.superfences",
        "pymdownx.tilde",
        "pymdownx.magiclink",
    ]

    def __init__(self, theme: Optional[MarkdownTheme] = None):
        self.theme = theme or MarkdownTheme()

    def preprocess(self, md_text: str) -> str:
        if not md_text:
            return ""
        out: List[str] = []
        for line in md_text.splitlines():
            line = _TASK_CHECKED.sub(r"\1☑ ", line)
            line = _TASK_UNCHECKED.sub(r"\1☐ ", line)
            out.append(line)
        return "\n".join(out)

    def css(self) -> str:
        t = self.theme
        return f"""
        body {{
          font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, Arial, sans-serif;
          margin: 12px;
          color: {t.text};
          background: {t.panel};
          font-size: 14px;
          line-height: 1.5;
        }}
        h1, h2, h3 {{ margin: 0.9em 0 0.4em; line-height: 1.2; }}
        p {{ margin: 0.5em 0; }}
        a {{ color: {t.link}; text-decoration: none; }}
        hr {{ border: 0; border-top: 1px solid {t.border}; margin: 1em 0; }}
        ul, ol {{ padding-left: 1.2em; margin: 0.5em 0; }}
        blockquote {{
          margin: 0.8em 0;
          padding: 0.2em 0 0.2em 0.9em;
          border-left: 4px solid {t.quote};
          color: {t.muted};
        }}
        code {{
          font-family: ui-monospace, Menlo, Consolas, monospace;
          background: {t.codebg};
          padding: 2px 5px;
        }}
        pre {{ background: {t.codebg}; padding: 10px 12px; border: 1px solid {t.border}; }}
        .admonition {{ border: 1px solid {t.border}; padding: 8px 10px; margin: 0.8em 0; }}
        .admonition-title {{ font-weight: 700; }}
        """

    def to_html(self, md_text: str) -> str:
        body = markdown(
            self.preprocess(md_text or ""),
            extensions=self.EXTENSIONS,
            output_format="html5",
        )
        return f"""
        <html>
          <head>
            <meta charset="utf-8"/>
            <style>{self.css()}</style>
          </head>
          <body>{body}</body>
        </html>
        """
