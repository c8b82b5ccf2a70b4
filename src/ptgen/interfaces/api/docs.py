"""Public documentation page served on GET / and GET /api."""

from __future__ import annotations

from typing import Any

from fastapi.responses import HTMLResponse, JSONResponse

from .responses import CORS_HEADERS, VERSION, copyright_line, json_response

HTML_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
    <title>PT-Gen - Generate PT Descriptions</title>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1">
    <style>
        body { font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, sans-serif; margin: 40px; line-height: 1.6; }
        .container { max-width: 800px; margin: 0 auto; }
        code { background: #f4f4f4; padding: 2px 4px; border-radius: 3px; }
        pre { background: #f4f4f4; padding: 12px; border-radius: 5px; overflow-x: auto; }
    </style>
</head>
<body>
    <div class="container">
        <h1>PT-Gen API Service</h1>
        <p>这是一个媒体信息生成服务，支持从豆瓣、IMDb、TMDB、Bangumi、Melon、Steam 等平台获取媒体信息。</p>
        <h2>Usage</h2>
        <pre>POST / {"url": "https://movie.douban.com/subject/1292052/"}
POST / {"source": "tmdb", "sid": "movie/550"}
POST / {"source": "imdb", "query": "Fight Club"}
POST / {"query": "搏击俱乐部"}</pre>
        <p>__COPYRIGHT__</p>
    </div>
</body>
</html>"""

API_DOC: dict[str, Any] = {
    "API Status": "PT-Gen API Service is running",
    "Endpoints": {
        "/": "API documentation (this page)",
        "/?source=[imdb|tmdb]&query=[name]": "Search for media by name",
        "/?url=[media_url]": "Generate media description by URL",
        "/?source=[douban|imdb|tmdb|bgm|melon|steam]&sid=[id]": "Generate media description by id",
    },
    "Notes": (
        "Please use the appropriate source and query parameters for search, "
        "or provide a direct URL for generation."
    ),
}


def prefers_json(accept: str | None) -> bool:
    """True only when JSON is explicitly ranked above HTML."""
    if not accept:
        return False
    ranks: dict[str, float] = {}
    for part in accept.split(","):
        media, _, params = part.strip().partition(";")
        q = 1.0
        for param in params.split(";"):
            name, _, value = param.strip().partition("=")
            if name == "q":
                try:
                    q = float(value)
                except ValueError:
                    q = 0.0
        ranks[media.strip().lower()] = q
    return ranks.get("application/json", 0.0) > ranks.get("text/html", 0.0)


def html_page(author: str) -> HTMLResponse:
    html = HTML_TEMPLATE.replace("__COPYRIGHT__", copyright_line(author))
    return HTMLResponse(html, headers=CORS_HEADERS)


def api_description(author: str, *, secured: bool) -> JSONResponse:
    return json_response(
        {
            **API_DOC,
            "Version": VERSION,
            "Author": author,
            "Copyright": copyright_line(author),
            "Security": "API key required for access" if secured else "Open access",
        },
        author=author,
    )


def documentation(author: str, *, accept: str | None, secured: bool):
    if prefers_json(accept):
        return api_description(author, secured=secured)
    return html_page(author)
