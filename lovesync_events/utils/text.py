"""Text cleaning for scraped listing pages.

Turns raw HTML or rendered markdown into short candidate lines, and rejects
navigation, error and placeholder content before anything reaches the
normalizer.
"""

import re
import unicodedata

from bs4 import BeautifulSoup


def normalize_unicode(text: str) -> str:
    """Normalize Unicode to NFKC form (folds full-width and ligature forms)."""
    return unicodedata.normalize("NFKC", text)


def fix_encoding_artifacts(text: str) -> str:
    """Replace smart quotes, dashes and other Windows-1252 leftovers."""
    if not text:
        return text

    replacements = {
        "\x93": '"',
        "\x94": '"',
        "\x91": "'",
        "\x92": "'",
        "“": '"',
        "”": '"',
        "‘": "'",
        "’": "'",
        "–": "-",  # En dash
        "—": "-",  # Em dash
        "…": "...",
        " ": " ",  # Non-breaking space
        "​": "",  # Zero-width space
    }
    for old, new in replacements.items():
        text = text.replace(old, new)
    return text


def normalize_whitespace(text: str, preserve_newlines: bool = True) -> str:
    """Collapse runs of whitespace.

    Args:
        text: Input text
        preserve_newlines: If True, keep line structure (max one blank line)
    """
    if not text:
        return text

    if preserve_newlines:
        text = re.sub(r"[ \t]+", " ", text)
        text = re.sub(r" *\n *", "\n", text)
        text = re.sub(r"\n{3,}", "\n\n", text)
    else:
        text = re.sub(r"\s+", " ", text)
    return text.strip()


def clean_text(text: str | None) -> str | None:
    """Unicode-normalize, fix artifacts and collapse whitespace."""
    if not text:
        return None
    result = normalize_unicode(text)
    result = fix_encoding_artifacts(result)
    result = "".join(c for c in result if unicodedata.category(c) != "Cc" or c in "\n\t")
    result = normalize_whitespace(result)
    return result or None


def html_to_text(html: str | None) -> str:
    """Extract visible text from HTML, one block element per line."""
    if not html:
        return ""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "noscript", "nav", "footer", "header", "svg", "form"]):
        tag.decompose()
    return soup.get_text(separator="\n")


URL_PATTERN = re.compile(r"(?:https?://|www\.)\S+", re.IGNORECASE)
MARKDOWN_LINK = re.compile(r"!?\[([^\]]*)\]\([^)]*\)")
MARKDOWN_NOISE = re.compile(r"^[#>*\-\s|`]+|[*_`|]+")
HTML_TAG = re.compile(r"<[^>]+>")
HTML_ENTITY = re.compile(r"&(?:[a-z]+|#\d+);", re.IGNORECASE)
CURRENCY_FRAGMENT = re.compile(
    r"(?:[₹$€£]|rs\.?|inr|usd|eur|gbp)\s*\d[\d,]*(?:\.\d+)?(?:\s*(?:-|to)\s*[₹$€£]?\s*\d[\d,]*(?:\.\d+)?)?"
    r"|\d[\d,]*(?:\.\d+)?\s*(?:rupees?|dollars?|euros?|pounds?)\b"
    r"|\bonwards\b",
    re.IGNORECASE,
)


def strip_urls(text: str) -> str:
    """Remove bare URLs."""
    return URL_PATTERN.sub("", text)


def strip_markup(text: str) -> str:
    """Remove HTML tags/entities and markdown decoration, keeping link text."""
    text = MARKDOWN_LINK.sub(r"\1", text)
    text = HTML_TAG.sub(" ", text)
    text = HTML_ENTITY.sub(" ", text)
    return MARKDOWN_NOISE.sub("", text)


def strip_currency(text: str) -> str:
    """Remove price fragments such as "₹500 - ₹2000" or "$10"."""
    return CURRENCY_FRAGMENT.sub("", text)


def extract_price(text: str) -> str | None:
    """Pull the first price-looking fragment out of a line, if any."""
    if re.search(r"\b(free|no charge|complimentary)\b", text, re.IGNORECASE):
        return "Free"
    match = CURRENCY_FRAGMENT.search(text)
    if match and re.search(r"\d", match.group(0)):
        return normalize_whitespace(match.group(0), preserve_newlines=False)
    return None


# ============================================================
# NON-EVENT HEURISTICS
# ============================================================

# Placeholder / error page markers
BLACKLIST_PATTERNS = [
    "404",
    "not found",
    "page not found",
    "error",
    "access denied",
    "this page does not exist",
    "content not available",
    "sign in required",
    "login required",
    "unauthorized",
    "server error",
    "internal error",
    "maintenance mode",
]

# Navigation / chrome that listing pages repeat on every screen
NAVIGATION_KEYWORDS = [
    "sign in",
    "sign up",
    "log in",
    "login",
    "register",
    "cookie",
    "privacy policy",
    "terms of use",
    "terms and conditions",
    "download the app",
    "get the app",
    "subscribe",
    "newsletter",
    "follow us",
    "contact us",
    "about us",
    "careers",
    "help centre",
    "help center",
    "view all",
    "see all",
    "load more",
    "filter",
    "sort by",
    "home",
    "menu",
    "search",
    "copyright",
    "all rights reserved",
]

EVENT_KEYWORDS = [
    "concert", "live", "show", "festival", "comedy", "stand-up", "standup",
    "workshop", "exhibition", "expo", "night", "party", "music", "tour",
    "theatre", "theater", "play", "match", "screening", "fest", "gig",
    "conference", "meetup", "summit", "class", "walk", "market", "fair",
    "dance", "yoga", "art", "food", "drinks", "jam", "session", "experience",
]


def is_blacklisted(text: str) -> bool:
    """True if the text looks like an error or placeholder page."""
    lowered = text.lower()
    return any(pattern in lowered for pattern in BLACKLIST_PATTERNS)


def is_navigation(text: str) -> bool:
    """True if the line is site chrome rather than a listing."""
    lowered = text.lower().strip(" .:|")
    if lowered in NAVIGATION_KEYWORDS:
        return True
    words = lowered.split()
    if len(words) <= 3 and any(keyword in lowered for keyword in NAVIGATION_KEYWORDS):
        return True
    return False


def looks_like_event(text: str) -> bool:
    """True if the line mentions something event-shaped."""
    lowered = text.lower()
    return any(re.search(rf"\b{re.escape(k)}\b", lowered) for k in EVENT_KEYWORDS)


def is_valid_title(title: str, min_length: int = 8, max_length: int = 150) -> bool:
    """Length bounds plus placeholder/navigation rejection."""
    if not min_length <= len(title) <= max_length:
        return False
    if is_blacklisted(title) or is_navigation(title):
        return False
    # Mostly digits or punctuation
    letters = sum(1 for c in title if c.isalpha())
    return letters >= len(title) * 0.5


def split_candidate_lines(raw: str, *, is_html: bool = False) -> list[str]:
    """Clean a page and split it into distinct candidate title lines.

    Order is preserved; repeated lines keep their first position.
    """
    text = html_to_text(raw) if is_html else raw
    text = clean_text(text) or ""

    seen: set[str] = set()
    lines: list[str] = []
    for line in text.split("\n"):
        line = strip_markup(line)
        line = strip_urls(line)
        line = normalize_whitespace(line, preserve_newlines=False)
        if not line:
            continue
        key = line.lower()
        if key in seen:
            continue
        seen.add(key)
        lines.append(line)
    return lines


def normalize_title(title: str | None) -> str:
    """Comparison key for titles: case, width and whitespace insensitive."""
    if not title:
        return ""
    result = normalize_unicode(fix_encoding_artifacts(title)).casefold()
    return re.sub(r"\s+", " ", result).strip()


def truncate(text: str | None, max_length: int, suffix: str = "...") -> str | None:
    """Truncate text to max_length at a word boundary."""
    if not text:
        return None
    if len(text) <= max_length:
        return text
    truncated = text[: max_length - len(suffix)]
    last_space = truncated.rfind(" ")
    if last_space > max_length // 2:
        truncated = truncated[:last_space]
    return truncated + suffix
