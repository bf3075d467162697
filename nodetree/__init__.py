"""
Mutable tree of value nodes,
with positional child lookup, cached depth,
and node-only or whole-subtree removal.

Please depend on / import only the objects included
in this init file.

"""


from .core import TreeNode, RelationshipError, AlreadyAttachedError, \
	CyclicRelationshipError
from .signal import Signal
__all__ = [
	"TreeNode",
	"Signal",
	"RelationshipError",
	"AlreadyAttachedError",
	"CyclicRelationshipError",
]
