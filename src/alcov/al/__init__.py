"""Lexical analysis of AL source files."""
