"""Stylesheet compiler and declaration converter adapters."""

from .base import AdapterError, DeclarationConverter, StylesheetCompiler
from .flow import FlowDeclarationConverter, extract_local_tokens, print_flow_definition
from .lexical import CssBlock, UnbalancedBracesError, mask_comments_and_strings, split_blocks

__all__ = [
    "AdapterError",
    "CssBlock",
    "DeclarationConverter",
    "FlowDeclarationConverter",
    "StylesheetCompiler",
    "UnbalancedBracesError",
    "extract_local_tokens",
    "mask_comments_and_strings",
    "print_flow_definition",
    "split_blocks",
]
