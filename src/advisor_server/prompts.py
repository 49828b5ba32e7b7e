"""Prompt templates for the advice features.

Keep prompts here so advisor logic remains clean and testable.
"""

from __future__ import annotations

from typing import Any

ADVISOR_INTRO = (
    "You are an expert AI financial advisor. Analyze the data provided and return "
    "3-5 actionable, personalized financial suggestions.\n\n"
)

ADVISOR_INSTRUCTIONS = (
    "=== INSTRUCTIONS ===\n"
    "Based on ALL the data above (user finances, news and market data), provide suggestions that:\n"
    "1. Are specific and actionable\n"
    "2. Reference current market conditions or news when relevant\n"
    "3. Consider the user's actual spending patterns (if available)\n"
    "4. Include a mix of short-term and long-term advice\n"
    "5. Are personalized to the user's financial situation\n\n"
    "Return ONLY valid JSON in this exact format:\n"
    '{"suggestions": [{"title": "Clear, actionable title", '
    '"description": "Detailed explanation with specific numbers or actions", '
    '"type": "info|success|warning", "category": "Savings|Budgeting|Investment|Planning"}]}\n'
)

MARKET_ANALYST_SYSTEM = "You are a helpful financial analyst assistant."


def build_advice_context(context: dict[str, Any], authenticated: bool) -> str:
    """Render whatever context slots arrived into the advisor prompt."""
    profile = context.get("profile")
    tips = context.get("expense_tips")
    news = context.get("news")
    market = context.get("market")

    parts = [ADVISOR_INTRO]
    summary = (profile or {}).get("summary") or {}
    has_data = bool(summary.get("totalIncome") or summary.get("totalExpense"))

    if authenticated and has_data:
        parts.append("=== USER FINANCIAL SUMMARY ===\n")
        parts.append(f"Income: ₹{summary.get('totalIncome', 0)}\n")
        parts.append(f"Expenses: ₹{summary.get('totalExpense', 0)}\n")
        parts.append(f"Net Balance: ₹{summary.get('netBalance', 0)}\n")
        parts.append(f"Period: {summary.get('periodDays', 30)} days\n")
        breakdown = profile.get("categoryBreakdown") or []
        if breakdown:
            parts.append("\nCategory Breakdown:\n")
            for cat in breakdown:
                parts.append(f"  - {cat.get('category')}: ₹{cat.get('total')} ({cat.get('count')} transactions)\n")
        parts.append("\n")
        if tips and tips.get("suggestions"):
            parts.append("=== EXPENSE REDUCTION SUGGESTIONS ===\n")
            for tip in tips["suggestions"]:
                parts.append(f"  - {tip.get('category')}: {tip.get('suggestion')}\n")
            parts.append("\n")
    else:
        parts.append("=== USER STATUS ===\nNew user or guest - provide beginner-friendly financial advice.\n\n")

    articles = (news or {}).get("articles") or []
    if articles:
        parts.append("=== CURRENT FINANCIAL NEWS ===\n")
        for i, article in enumerate(articles, start=1):
            parts.append(f"{i}. {article.get('title')}\n")
            if article.get("description"):
                parts.append(f"   {article['description'][:120]}...\n")
        parts.append("\n")

    quotes = (market or {}).get("marketData") or []
    if quotes:
        parts.append("=== MARKET DATA ===\n")
        for quote in quotes:
            parts.append(f"  - {format_quote(quote)}\n")
        parts.append("\n")

    parts.append(ADVISOR_INSTRUCTIONS)
    return "".join(parts)


def format_quote(quote: dict[str, Any]) -> str:
    line = f"{quote.get('symbol')}: Price {quote.get('price')}, Change {quote.get('changePercent')}"
    if quote.get("synthetic"):
        line += " (synthetic placeholder, live data unavailable)"
    return line


def build_market_summary_prompt(quotes: list[dict[str, Any]]) -> str:
    lines = "\n".join(f"- {format_quote(q)}" for q in quotes)
    return f"Based on the following market data, provide a brief, one-paragraph market summary:\n{lines}"
