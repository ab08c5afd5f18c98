"""gfmark renderers.

Renderers convert a Document into an output format.

Available Renderers:
- HtmlRenderer: Renders the tree to HTML using StringBuilder pattern

Thread Safety:
Renderers keep per-call state local to each render() call.
Safe for concurrent use from multiple threads.
"""

from gfmark.renderers.html import HtmlRenderer

__all__ = ["HtmlRenderer"]
