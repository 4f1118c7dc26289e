"""Inline markup: table directives, style spans, parsing and preview rendering."""

from doccomposer.markup.parser import parse, tokenize
from doccomposer.markup.render import render, render_html, strip_formatting, to_plain_text
from doccomposer.markup.serializer import clean_cell, format_table, serialize
from doccomposer.markup.styles import apply_style, style_tags
from doccomposer.markup.tokens import MarkupToken, PlainText, StyleKind, StyleSpan, TableDirective

__all__ = [
    "MarkupToken",
    "PlainText",
    "StyleKind",
    "StyleSpan",
    "TableDirective",
    "serialize",
    "format_table",
    "clean_cell",
    "parse",
    "tokenize",
    "render",
    "render_html",
    "strip_formatting",
    "to_plain_text",
    "apply_style",
    "style_tags",
]
