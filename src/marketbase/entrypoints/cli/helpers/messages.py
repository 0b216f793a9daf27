"""Terminal message helpers for the marketbase CLI.

Messages write to stderr so stdout can remain machine-readable. Glyphs fall
back to ASCII when stderr cannot encode emoji.
"""

import click

GLYPHS = {
    "warn": ("⚠️", "[!]"),
    "success": ("✅", "[OK]"),
    "error": ("❌", "[X]"),
}


def _supports_character(character: str) -> bool:
    """Return True if `character` can be encoded on stderr."""
    stream = click.get_text_stream("stderr")  # pragma: no mutate
    encoding = getattr(stream, "encoding", None) or "ascii"
    try:
        character.encode(encoding)
    except UnicodeEncodeError:
        return False
    return True


def glyph(kind: str) -> str:
    """Return the marker for `kind` (``warn``, ``success`` or ``error``).

    Example:
        ``glyph("success")`` is ``"✅"`` on a UTF-8 terminal, ``"[OK]"`` otherwise.
    """
    emoji, fallback = GLYPHS[kind]
    return emoji if _supports_character(emoji) else fallback


def warn(msg: str) -> None:
    """Emit a yellow, bold warning line to **stderr**."""
    click.secho(f"{glyph('warn')}  {msg}", fg="yellow", bold=True, err=True)


def success(msg: str) -> None:
    """Emit a green, bold success line to **stderr**."""
    click.secho(f"{glyph('success')}  {msg}", fg="green", bold=True, err=True)


def error(msg: str) -> None:
    """Emit a red, bold error line to **stderr**."""
    click.secho(f"{glyph('error')}  {msg}", fg="red", bold=True, err=True)
