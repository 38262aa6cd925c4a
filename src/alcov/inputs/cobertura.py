from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import TYPE_CHECKING, Protocol

from defusedxml import DefusedXmlException, ElementTree

from alcov.core.model.cobertura import (
    CoberturaClass,
    CoberturaDocument,
    CoberturaLine,
    CoberturaMethod,
    CoberturaPackage,
)
from alcov.errors import InvalidCoberturaXMLError

if TYPE_CHECKING:
    from pathlib import Path


class ElementLike(Protocol):
    """Simplified Element protocol that matches the subset of behavior we consume."""

    tag: str | None
    text: str | None

    def findall(self, path: str) -> list[ElementLike]: ...

    def get(self, key: str, default: str | None = None) -> str | None: ...


def read_root(path: Path) -> ElementLike:
    """Parse Cobertura XML and return the ``<coverage>`` root element.

    Malformed XML and constructs defusedxml refuses (entities, DTD tricks)
    raise :class:`InvalidCoberturaXMLError`.
    """
    try:
        root = ElementTree.parse(path).getroot()
    except (ET.ParseError, DefusedXmlException) as exc:
        msg = f"invalid Cobertura XML in {path}: {exc}"
        raise InvalidCoberturaXMLError(msg) from exc
    tag = (root.tag or "").split("}")[-1]  # tolerate namespaces
    if tag.lower() != "coverage":
        msg = f"unexpected root tag {root.tag!r} in {path}"
        raise InvalidCoberturaXMLError(msg)
    return root


def _int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(float(value))
    except ValueError:
        return None


def _lines(parent: ElementLike) -> tuple[CoberturaLine, ...]:
    out: list[CoberturaLine] = []
    for line_elem in parent.findall("./lines/line"):
        number = _int(line_elem.get("number"))
        hits = _int(line_elem.get("hits"))
        if number is None or hits is None:
            continue
        out.append(CoberturaLine(number=number, hits=hits, is_branch=line_elem.get("branch") == "true"))
    return tuple(out)


def _class(cls: ElementLike) -> CoberturaClass | None:
    filename = cls.get("filename")
    if not filename:
        return None
    methods = tuple(
        CoberturaMethod(name=m.get("name") or "", signature=m.get("signature") or "()", lines=_lines(m))
        for m in cls.findall("./methods/method")
    )
    return CoberturaClass(
        name=cls.get("name") or filename,
        filename=filename.replace("\\", "/"),
        lines=_lines(cls),
        methods=methods,
    )


def read_document(path: Path) -> CoberturaDocument:
    """Read a Cobertura file into the in-memory document model.

    Documents without packages or classes are valid and simply empty.
    """
    root = read_root(path)
    sources = tuple((s.text or "").strip() for s in root.findall("./sources/source") if (s.text or "").strip())
    packages: list[CoberturaPackage] = []
    for pkg in root.findall("./packages/package"):
        classes = tuple(c for c in (_class(e) for e in pkg.findall("./classes/class")) if c is not None)
        packages.append(CoberturaPackage(name=pkg.get("name") or "", classes=classes))
    return CoberturaDocument(
        timestamp=_int(root.get("timestamp")) or 0,
        sources=sources,
        packages=tuple(packages),
    )


__all__ = ["ElementLike", "read_document", "read_root"]
