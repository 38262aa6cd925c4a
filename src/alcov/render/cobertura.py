"""Serialise a :class:`CoberturaDocument` to Cobertura XML."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import TYPE_CHECKING

from alcov._meta import __version__
from alcov.core.model.cobertura import format_rate

if TYPE_CHECKING:
    from collections.abc import Iterable

    from alcov.core.model.cobertura import CoberturaDocument, CoberturaLine

DOCTYPE = '<!DOCTYPE coverage SYSTEM "http://cobertura.sourceforge.net/xml/coverage-04.dtd">'


def _lines(parent: ET.Element, lines: Iterable[CoberturaLine]) -> None:
    lines_elem = ET.SubElement(parent, "lines")
    for ln in lines:
        ET.SubElement(
            lines_elem,
            "line",
            number=str(ln.number),
            hits=str(ln.hits),
            branch="true" if ln.is_branch else "false",
        )


def build_element(doc: CoberturaDocument) -> ET.Element:
    root = ET.Element(
        "coverage",
        {
            "line-rate": format_rate(doc.line_rate),
            "branch-rate": "0",
            "lines-covered": str(doc.lines_covered),
            "lines-valid": str(doc.lines_valid),
            "branches-covered": "0",
            "branches-valid": "0",
            "complexity": "0",
            "version": __version__,
            "timestamp": str(doc.timestamp),
        },
    )
    sources = ET.SubElement(root, "sources")
    for src in doc.sources:
        ET.SubElement(sources, "source").text = src

    packages = ET.SubElement(root, "packages")
    for pkg in doc.packages:
        pkg_elem = ET.SubElement(
            packages,
            "package",
            {"name": pkg.name, "line-rate": format_rate(pkg.line_rate), "branch-rate": "0", "complexity": "0"},
        )
        classes = ET.SubElement(pkg_elem, "classes")
        for cls in pkg.classes:
            cls_elem = ET.SubElement(
                classes,
                "class",
                {
                    "name": cls.name,
                    "filename": cls.filename,
                    "line-rate": format_rate(cls.line_rate),
                    "branch-rate": "0",
                    "complexity": "0",
                },
            )
            methods = ET.SubElement(cls_elem, "methods")
            for method in cls.methods:
                m_elem = ET.SubElement(
                    methods,
                    "method",
                    {
                        "name": method.name,
                        "signature": method.signature,
                        "line-rate": format_rate(method.line_rate),
                        "branch-rate": "0",
                        "complexity": "0",
                    },
                )
                _lines(m_elem, method.lines)
            _lines(cls_elem, cls.lines)
    return root


def render_cobertura(doc: CoberturaDocument) -> str:
    """Return the indented XML text, declaration and DOCTYPE included."""
    root = build_element(doc)
    ET.indent(root, space="  ")
    body = ET.tostring(root, encoding="unicode")
    return f'<?xml version="1.0" encoding="utf-8"?>\n{DOCTYPE}\n{body}\n'


__all__ = ["DOCTYPE", "build_element", "render_cobertura"]
