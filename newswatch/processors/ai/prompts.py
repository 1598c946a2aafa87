from __future__ import annotations

from typing import Optional

# Keeps prompts within typical context windows.
MAX_CONTENT_CHARS = 6000


def _clip(content: Optional[str]) -> str:
    return (content or "")[:MAX_CONTENT_CHARS]


def summarize_prompt(url: str, content: Optional[str], *, language: str) -> str:
    body = f"ARTICLE TEXT:\n{_clip(content)}\n" if content else ""
    return (
        "You are a professional news summarizer. "
        f"Summarize the news article at the following URL concisely, in {language}.\n\n"
        f"URL: {url}\n{body}\n"
        'Output MUST be a single JSON object: {"summary": string}. '
        "Do not include markdown, code fences, or extra text.\n"
    )


def fake_news_prompt(url: str, content: str, *, language: str) -> str:
    return (
        "You are an expert in detecting fake news and misinformation. "
        "Analyze the following news article and decide whether it is likely to contain "
        "misinformation or fake news.\n\n"
        f"URL: {url}\nARTICLE CONTENT:\n{_clip(content)}\n\n"
        "Output MUST be a single JSON object with keys: "
        "isFakeNews (boolean), confidenceScore (number 0-1), "
        f"reason (string, in {language}). "
        "Do not include markdown, code fences, or extra text.\n"
    )


def verify_claim_prompt(claim_text: str, *, language: str) -> str:
    return (
        "You are a research assistant who verifies claims using web search.\n\n"
        f'CLAIM: "{claim_text}"\n\n'
        "1. Search the web for information related to the claim.\n"
        "2. Evaluate the credibility of the sources you find.\n"
        '3. Decide whether the claim is "LikelyTrue", "LikelyFalse" or "Uncertain".\n'
        f"4. Give a brief, logical explanation in {language}.\n"
        "5. List the key supporting evidence (links where possible, otherwise short summaries).\n\n"
        "Output MUST be a single JSON object with keys: verdict (one of LikelyTrue, LikelyFalse, "
        "Uncertain), explanation (string), supportingEvidence (array of strings). "
        "Do not include markdown, code fences, or extra text.\n"
    )
