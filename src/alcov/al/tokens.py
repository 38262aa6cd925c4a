"""Shared lexical helpers for AL source text.

The line classifier and the procedure extractor both walk a file one physical
line at a time; everything they need to agree on (comment handling, literal
masking, block keywords, signature shapes) lives here.
"""

from __future__ import annotations

import re

# --------------------------------------------------------------------------- #
# Patterns                                                                    #
# --------------------------------------------------------------------------- #

_IDENT = r'(?:"[^"]+"|[A-Za-z_]\w*)'

SIGNATURE_RE = re.compile(
    r"^(?:(?:local|internal|protected)\s+)?(?P<kind>procedure|trigger)\s+(?P<name>" + _IDENT + r")\s*\(",
    re.IGNORECASE,
)

_OBJECT_KEYWORDS = (
    "codeunit",
    "table",
    "page",
    "report",
    "query",
    "xmlport",
    "enum",
    "interface",
    "permissionset",
    "tableextension",
    "pageextension",
    "reportextension",
    "enumextension",
    "permissionsetextension",
    "profile",
    "controladdin",
    "entitlement",
    "dotnet",
    "pagecustomization",
)

OBJECT_DECL_RE = re.compile(
    r"^(?:" + "|".join(_OBJECT_KEYWORDS) + r')\s+(?:\d+|"|[A-Za-z_])',
    re.IGNORECASE,
)

NAMESPACE_RE = re.compile(r"^(?:namespace|using)\s", re.IGNORECASE)

FIELD_DEF_RE = re.compile(r"^field\s*\(", re.IGNORECASE)

ATTRIBUTE_RE = re.compile(r"^\[.*\]$")

# `Identifier = value` with a single `=`; `:=` and compound operators never match.
PROPERTY_RE = re.compile(r"^" + _IDENT + r"\s*=(?!=)")

VAR_HEADER_RE = re.compile(r"^(?:protected\s+)?var\b", re.IGNORECASE)

_BUILTIN_TYPES = (
    "action",
    "array",
    "automation",
    "bigint",
    "biginteger",
    "bigtext",
    "blob",
    "boolean",
    "byte",
    "char",
    "clienttype",
    "code",
    "codeunit",
    "cookie",
    "datascope",
    "date",
    "dateformula",
    "datetime",
    "decimal",
    "dialog",
    "dictionary",
    "dotnet",
    "duration",
    "enum",
    "errorinfo",
    "errortype",
    "executioncontext",
    "executionmode",
    "fieldref",
    "file",
    "filterpagebuilder",
    "guid",
    "httpclient",
    "httpcontent",
    "httpheaders",
    "httprequestmessage",
    "httpresponsemessage",
    "instream",
    "integer",
    "interface",
    "isolatedstorage",
    "jsonarray",
    "jsonobject",
    "jsontoken",
    "jsonvalue",
    "keyref",
    "label",
    "list",
    "media",
    "mediaset",
    "moduleinfo",
    "notification",
    "objecttype",
    "option",
    "outstream",
    "page",
    "query",
    "record",
    "recordid",
    "recordref",
    "report",
    "reportformat",
    "secrettext",
    "sessioninformation",
    "sessionsettings",
    "tableconnectiontype",
    "testaction",
    "testfield",
    "testfilter",
    "testpage",
    "testpart",
    "testrequestpage",
    "text",
    "textbuilder",
    "textconst",
    "textencoding",
    "time",
    "transactiontype",
    "variant",
    "verbosity",
    "xmlattribute",
    "xmlcdata",
    "xmlcomment",
    "xmldeclaration",
    "xmldocument",
    "xmlelement",
    "xmlnamespacemanager",
    "xmlnode",
    "xmlnodelist",
    "xmlport",
    "xmlreadoptions",
    "xmltext",
    "xmlwriteoptions",
)

TYPED_VAR_RE = re.compile(
    r"^(?:var\s+)?"
    + _IDENT
    + r"(?:\s*,\s*"
    + _IDENT
    + r")*\s*:\s*(?:temporary\s+)?(?:"
    + "|".join(_BUILTIN_TYPES)
    + r")\b",
    re.IGNORECASE,
)

_SECTION_KEYWORDS = (
    "actions",
    "dataset",
    "elements",
    "fieldgroups",
    "fields",
    "keys",
    "labels",
    "layout",
    "rendering",
    "requestpage",
    "schema",
    "views",
)

SECTION_RE = re.compile(r"^(?:" + "|".join(_SECTION_KEYWORDS) + r")$", re.IGNORECASE)

_BLOCK_DECL_KEYWORDS = (
    "action",
    "actionref",
    "add",
    "addafter",
    "addbefore",
    "addfirst",
    "addlast",
    "area",
    "chartpart",
    "column",
    "cuegroup",
    "customaction",
    "dataitem",
    "field",
    "fieldattribute",
    "fieldelement",
    "fieldgroup",
    "filter",
    "fileuploadaction",
    "fixed",
    "grid",
    "group",
    "key",
    "label",
    "layout",
    "modify",
    "moveafter",
    "movebefore",
    "movefirst",
    "movelast",
    "part",
    "repeater",
    "separator",
    "systemaction",
    "systempart",
    "tableelement",
    "textattribute",
    "textelement",
    "usercontrol",
    "value",
    "view",
)

BLOCK_DECL_RE = re.compile(r"^(?:" + "|".join(_BLOCK_DECL_KEYWORDS) + r")\s*\(", re.IGNORECASE)

STRUCTURAL_RE = re.compile(r"^(?:begin|end\s*[;.]?|\{|\}\s*;?|\{\s*\}\s*;?)$", re.IGNORECASE)

ELSE_RE = re.compile(r"^(?:end\s+)?else(?:\s+begin)?$", re.IGNORECASE)

CONTROL_START_RE = re.compile(r"^(?:if|else|for|foreach|while|repeat|until|case|with|exit)\b", re.IGNORECASE)

STATEMENT_SHAPE_RE = re.compile(
    r":=|^(?:if|else|for|foreach|while|repeat|until|case)\b|\b(?:exit|error|message)\s*\(|\.[A-Za-z_]\w*\s*\(|;$",
    re.IGNORECASE,
)

_CONT_SYMBOLS = r"[,=(+\-*/\[]|:=|[+\-*/]="

LEADING_CONT_RE = re.compile(
    r"^(?:" + _CONT_SYMBOLS + r"|(?:in|and|or|xor|not|then|do|of)\b)",
    re.IGNORECASE,
)

TRAILING_CONT_RE = re.compile(
    r"(?:" + _CONT_SYMBOLS + r"|\b(?:in|and|or|xor|not))$",
    re.IGNORECASE,
)

_BEGIN_RE = re.compile(r"\bbegin\b", re.IGNORECASE)
_CASE_OF_RE = re.compile(r"\bcase\b.*?\bof\b", re.IGNORECASE)
_END_RE = re.compile(r"\bend\b", re.IGNORECASE)

SUBTYPE_TEST_RE = re.compile(r"^\s*Subtype\s*=\s*Test\s*;", re.IGNORECASE | re.MULTILINE)


# --------------------------------------------------------------------------- #
# Helpers                                                                     #
# --------------------------------------------------------------------------- #


class CommentTracker:
    """Strip ``//`` and ``/* ... */`` comments, carrying block state across lines."""

    __slots__ = ("in_block",)

    def __init__(self) -> None:
        self.in_block = False

    def strip(self, line: str) -> str:
        """Return the comment-free code of *line*, stripped of surrounding whitespace."""
        out: list[str] = []
        quote: str | None = None
        i = 0
        n = len(line)
        while i < n:
            if self.in_block:
                close = line.find("*/", i)
                if close < 0:
                    break
                self.in_block = False
                out.append(" ")
                i = close + 2
                continue
            ch = line[i]
            if quote is not None:
                out.append(ch)
                if ch == quote:
                    quote = None
                i += 1
                continue
            if ch in "'\"":
                quote = ch
                out.append(ch)
                i += 1
                continue
            if line.startswith("//", i):
                break
            if line.startswith("/*", i):
                self.in_block = True
                i += 2
                continue
            out.append(ch)
            i += 1
        return "".join(out).strip()


def mask_literals(code: str) -> str:
    """Blank out the contents of string literals and quoted identifiers.

    Quotes are kept so the shape of the line survives; keywords and operators
    inside literals no longer match anything.
    """
    out: list[str] = []
    quote: str | None = None
    for ch in code:
        if quote is not None:
            if ch == quote:
                quote = None
                out.append(ch)
            else:
                out.append("x")
            continue
        if ch in "'\"":
            quote = ch
        out.append(ch)
    return "".join(out)


def count_blocks(masked: str) -> tuple[int, int]:
    """Return ``(opened, closed)`` block counts for one masked line.

    ``begin`` and ``case ... of`` open a block; every ``end`` closes one.
    """
    opened = len(_BEGIN_RE.findall(masked)) + len(_CASE_OF_RE.findall(masked))
    closed = len(_END_RE.findall(masked))
    return opened, closed


def paren_balance(masked: str) -> int:
    return masked.count("(") - masked.count(")")


def unquote(name: str) -> str:
    if len(name) >= 2 and name[0] == name[-1] == '"':  # noqa: PLR2004
        return name[1:-1]
    return name


__all__ = [
    "ATTRIBUTE_RE",
    "BLOCK_DECL_RE",
    "CONTROL_START_RE",
    "ELSE_RE",
    "FIELD_DEF_RE",
    "LEADING_CONT_RE",
    "NAMESPACE_RE",
    "OBJECT_DECL_RE",
    "PROPERTY_RE",
    "SECTION_RE",
    "SIGNATURE_RE",
    "STATEMENT_SHAPE_RE",
    "STRUCTURAL_RE",
    "SUBTYPE_TEST_RE",
    "TRAILING_CONT_RE",
    "TYPED_VAR_RE",
    "VAR_HEADER_RE",
    "CommentTracker",
    "count_blocks",
    "mask_literals",
    "paren_balance",
    "unquote",
]
