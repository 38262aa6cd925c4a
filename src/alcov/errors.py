"""Centralised exception hierarchy for alcov."""

from __future__ import annotations


class AlcovError(Exception):
    """Base class for all custom alcov exceptions."""


class SourceRootNotFoundError(AlcovError):
    """The AL source root directory does not exist."""


class CoverageDumpError(AlcovError):
    """Base class for errors related to raw coverage dumps."""


class CoverageDumpNotFoundError(CoverageDumpError):
    """A coverage dump file or directory could not be located on disk."""


class EmptyCoverageDumpError(CoverageDumpError):
    """The coverage dump(s) were read but contained no entries."""


class CoberturaXMLError(AlcovError):
    """Base class for errors related to Cobertura XML handling."""


class InvalidCoberturaXMLError(CoberturaXMLError):
    """Cobertura XML file was found but does not contain a valid report."""


class NoMergeInputError(CoberturaXMLError):
    """A merge was requested but none of the inputs could be read."""


class TestResultsError(AlcovError):
    """Test-result JSON could not be read or has an unexpected shape."""

    __test__ = False


__all__ = [
    "AlcovError",
    "CoberturaXMLError",
    "CoverageDumpError",
    "CoverageDumpNotFoundError",
    "EmptyCoverageDumpError",
    "InvalidCoberturaXMLError",
    "NoMergeInputError",
    "SourceRootNotFoundError",
    "TestResultsError",
]
