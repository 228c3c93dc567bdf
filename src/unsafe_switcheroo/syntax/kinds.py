"""
Node kind names of the tree-sitter Rust grammar used by the engine.
"""

SOURCE_FILE = "source_file"
BLOCK = "block"
UNSAFE_BLOCK = "unsafe_block"
UNSAFE_KW = "unsafe"
LABEL = "label"
ERROR = "ERROR"

# Statements
EXPRESSION_STATEMENT = "expression_statement"
LET_DECLARATION = "let_declaration"
MUTABLE_SPECIFIER = "mutable_specifier"

# Expressions
CALL_EXPRESSION = "call_expression"
ARGUMENTS = "arguments"
FIELD_EXPRESSION = "field_expression"
FIELD_IDENTIFIER = "field_identifier"
SCOPED_IDENTIFIER = "scoped_identifier"
IDENTIFIER = "identifier"
INDEX_EXPRESSION = "index_expression"
TYPE_CAST_EXPRESSION = "type_cast_expression"
REFERENCE_EXPRESSION = "reference_expression"
PARENTHESIZED_EXPRESSION = "parenthesized_expression"
ASSIGNMENT_EXPRESSION = "assignment_expression"
COMPOUND_ASSIGNMENT_EXPR = "compound_assignment_expr"
BINARY_EXPRESSION = "binary_expression"

LINE_COMMENT = "line_comment"
BLOCK_COMMENT = "block_comment"

COMMENT_KINDS = frozenset({LINE_COMMENT, BLOCK_COMMENT})

# Expressions whose right operand may carry a raw-bytes call
OPERAND_KINDS = frozenset({ASSIGNMENT_EXPRESSION, COMPOUND_ASSIGNMENT_EXPR, BINARY_EXPRESSION})

# Wrappers peeled off a pointer argument to reach the indexed buffer
POINTER_WRAPPER_KINDS = frozenset({TYPE_CAST_EXPRESSION, REFERENCE_EXPRESSION, PARENTHESIZED_EXPRESSION})
POINTER_METHODS = frozenset({"as_ptr", "as_mut_ptr"})
