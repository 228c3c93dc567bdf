"""
Syntax Package.

Exposes the tree-sitter backed `SyntaxTree` and the `TextRange` value type
consumed by the rewrite engine.
"""

from unsafe_switcheroo.syntax.tree import SyntaxTree, TextRange, is_comment, same_node

__all__ = ["SyntaxTree", "TextRange", "is_comment", "same_node"]
