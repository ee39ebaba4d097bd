from src.utils.text import escape_markdown, fmt_money, fmt_quantity, fmt_signed_pct, split_message

def test_money_thousands():
    assert fmt_money(1234.5) == "1,234.50"

def test_money_negative():
    assert fmt_money(-0.5) == "-0.50"

def test_pct_positive_has_sign():
    assert fmt_signed_pct(0.1234) == "+12.34%"

def test_pct_negative():
    assert fmt_signed_pct(-0.05) == "-5.00%"

def test_pct_zero():
    assert fmt_signed_pct(0) == "+0.00%"

def test_quantity_whole():
    assert fmt_quantity(10.0) == "10"

def test_quantity_fraction():
    assert fmt_quantity(0.25) == "0.25"

def test_escape_markdown():
    assert escape_markdown("BRK_B *x*") == "BRK\\_B \\*x\\*"


def test_escape_markdown_leaves_backslash_alone():
    assert escape_markdown("C:\\ledger") == "C:\\ledger"


def test_split_message_short_text_is_one_chunk():
    assert split_message("a\nb") == ["a\nb"]


def test_split_message_breaks_on_lines():
    lines = [f"line {i:03d}" for i in range(100)]
    chunks = split_message("\n".join(lines), limit=100)
    assert all(len(c) <= 100 for c in chunks)
    assert "\n".join(chunks).split("\n") == lines


def test_split_message_cuts_overlong_line():
    chunks = split_message("x" * 250, limit=100)
    assert [len(c) for c in chunks] == [100, 100, 50]
