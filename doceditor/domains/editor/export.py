import html
from dataclasses import dataclass
from datetime import datetime

from doceditor.domains.editor.content import ContentTree, plain_text, render_html

DEFAULT_TITLE = "Untitled Document"
DEFAULT_FILENAME = "document"
DATE_FORMAT = "%m/%d/%Y"

HTML_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>{title}</title>
<style>
body {{ font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; max-width: 800px; margin: 0 auto; padding: 40px 20px; line-height: 1.6; color: #333; }}
h1 {{ color: #2563eb; border-bottom: 2px solid #e5e7eb; padding-bottom: 10px; }}
h2 {{ color: #374151; margin-top: 30px; }}
p {{ margin-bottom: 15px; }}
ul, ol {{ margin-bottom: 15px; }}
blockquote {{ border-left: 4px solid #2563eb; padding-left: 20px; margin: 20px 0; font-style: italic; }}
pre {{ background: #f3f4f6; padding: 12px; border-radius: 6px; overflow-x: auto; }}
</style>
</head>
<body>
<h1>{title}</h1>
<p style="color: #6b7280; font-size: 0.9em; margin-bottom: 30px;">
Created: {created} |
Last updated: {updated}
</p>
{body}
</body>
</html>"""


@dataclass(frozen=True)
class ExportedFile:
    filename: str
    media_type: str
    content: str


def export_filename(title: str, extension: str) -> str:
    return f"{title or DEFAULT_FILENAME}.{extension}"


def export_html(title: str, created_at: datetime, updated_at: datetime, tree: ContentTree) -> ExportedFile:
    """Самодостаточный HTML-документ: заголовок, даты и тело без внешних стилей"""
    content = HTML_TEMPLATE.format(
        title=html.escape(title or DEFAULT_TITLE),
        created=created_at.strftime(DATE_FORMAT),
        updated=updated_at.strftime(DATE_FORMAT),
        body=render_html(tree),
    )
    return ExportedFile(
        filename=export_filename(title, "html"),
        media_type="text/html",
        content=content,
    )


def export_text(title: str, tree: ContentTree) -> ExportedFile:
    return ExportedFile(
        filename=export_filename(title, "txt"),
        media_type="text/plain",
        content=plain_text(tree),
    )
