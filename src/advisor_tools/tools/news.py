"""Financial news tool."""

from __future__ import annotations

from ..adapters.newsapi import fetch_top_headlines
from ..schemas import NewsArticle, NewsInput, NewsOutput
from ..settings import ToolServerSettings

DEFAULT_TOPIC = "India stock market"


def get_financial_news(payload: NewsInput, settings: ToolServerSettings, _request_id: str) -> NewsOutput:
    # Delegate upstream call to adapter; keep tool thin.
    articles = fetch_top_headlines(
        api_key=settings.news_api_key,
        category=payload.category,
        limit=payload.limit,
        query=payload.topic or DEFAULT_TOPIC,
        country=settings.news_country,
        timeout_s=settings.request_timeout_s,
    )
    return NewsOutput(
        articles=[
            NewsArticle(
                title=item.get("title") or "",
                description=item.get("description"),
                url=item.get("url"),
                source=(item.get("source") or {}).get("name"),
                published_at=item.get("publishedAt"),
            )
            for item in articles[: payload.limit]
        ]
    )
