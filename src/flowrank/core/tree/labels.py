"""Per-level display labels: integers for roots, letters below."""

LETTERS = "abcdefghijklmnopqrstuvwxyz"


def root_label(position: int) -> str:
    """Label of the root at 0-based ``position`` among visible roots."""
    return str(position + 1)


def letter_label(position: int) -> str:
    """Label of the child at 0-based ``position`` among visible siblings.

    Bijective base-26, the way spreadsheet columns are named:
    a..z, aa..az, ba.., zz, aaa...
    """
    if position < 0:
        msg = f"position must be non-negative, got {position!r}"
        raise ValueError(msg)
    n = position + 1
    out: list[str] = []
    while n:
        n, rem = divmod(n - 1, len(LETTERS))
        out.append(LETTERS[rem])
    return "".join(reversed(out))


def join_label(parent_label: str, own_label: str, separator: str) -> str:
    return f"{parent_label}{separator}{own_label}"
