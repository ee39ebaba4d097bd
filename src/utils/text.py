def fmt_money(value: float, decimals: int = 2) -> str:
    """Thousands-separated amount with a leading minus for losses.

    Examples:
        1234.5   → '1,234.50'
        -0.5     → '-0.50'
    """
    return f"{value:,.{decimals}f}"


def fmt_signed_pct(ratio: float) -> str:
    """Render a ratio as a signed percentage: 0.1234 → '+12.34%'."""
    sign = "+" if ratio >= 0 else ""
    return f"{sign}{ratio * 100:.2f}%"


def fmt_quantity(value: float) -> str:
    """Drop the decimals for whole quantities: 10.0 → '10', 0.25 → '0.25'."""
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.4f}".rstrip("0").rstrip(".")


def escape_markdown(text: str) -> str:
    """Escape the characters Telegram's legacy Markdown treats as markup.

    Only ``_ * ` [`` can be escaped there; a backslash is shown as is.
    """
    for ch in ("_", "*", "`", "["):
        text = text.replace(ch, f"\\{ch}")
    return text


def split_message(text: str, limit: int = 4000) -> list[str]:
    """Split text on line boundaries into chunks that fit one Telegram message.

    A single line longer than ``limit`` is cut hard.
    """
    chunks: list[str] = []
    current = ""
    for line in text.split("\n"):
        while len(line) > limit:
            if current:
                chunks.append(current)
                current = ""
            chunks.append(line[:limit])
            line = line[limit:]
        candidate = f"{current}\n{line}" if current else line
        if len(candidate) > limit:
            chunks.append(current)
            current = line
        else:
            current = candidate
    if current or not chunks:
        chunks.append(current)
    return chunks
