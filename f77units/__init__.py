"""Abstract syntax trees and symbol tables for parsed FORTRAN 77 program units."""

__version__ = "0.1.0"

__all__ = ["convert", "parser", "symbols", "syntax", "tree", "units"]