""" mutable tree of value nodes
 relationship management and cached depth, before any other modules """
from __future__ import annotations

import logging
import weakref
from collections import deque
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from nodetree.lib import parseAddressTokens
from nodetree.signal import Signal

log = logging.getLogger(__name__)


class RelationshipError(RuntimeError):
	""" base for any attachment that would break the tree
	indices are positions of the offending candidates
	in the batch given to the failed operation """

	def __init__(self, message, indices=(), nodes=()):
		super(RelationshipError, self).__init__(message)
		self.indices = list(indices)
		self.nodes = list(nodes)


class AlreadyAttachedError(RelationshipError):
	""" one or more candidates already have a parent """

	def __init__(self, indices, nodes):
		message = ", ".join(
			"This node, index {}, is already the child of another".format(i)
			for i in indices)
		super(AlreadyAttachedError, self).__init__(message, indices, nodes)


class CyclicRelationshipError(RelationshipError):
	""" candidate is the intended parent, or one of its ancestors """

	def __init__(self, indices, nodes):
		message = ", ".join(
			"This node, index {}, is an ancestor of the intended parent".format(i)
			for i in indices)
		super(CyclicRelationshipError, self).__init__(message, indices, nodes)


def propagateDepth(nodes:Iterable[TreeNode]):
	""" recompute cached depth for everything below the given nodes -
	their own depth is expected to be correct already
	worklist over the given subtrees only, trees may be deeper
	than the recursion limit """
	toVisit = deque(nodes)
	while toVisit:
		node = toVisit.popleft()
		for child in node._children:
			child._depth = node._depth + 1
			toVisit.append(child)


class TreeNode(object):
	"""mutable tree node holding a single value

	children are owned by their parent's list, the parent is only
	held weakly - a node stays alive as long as its parent or any
	caller holds it

	all structural changes go through setRelationship,
	setMultipleRelationships, removeNode and removeSubtree,
	which keep parent references, children lists and depth in agreement

	children are addressed by position:
	>>>root(1, 0, 2)
	is the third child of the first child of the second child of root
	"""

	# address tokens
	sep = "."
	parentToken = "^"
	# these can be reset directly on node instances to customise syntax

	indentToken = "  "

	debugOn = False

	class StructureEvents(Enum):
		childAdded = 1
		childRemoved = 2
		childrenPromoted = 3
		childOrphaned = 4

	def __init__(self, value):
		self._value = value
		self._parentRef = None
		self._children = []
		self._depth = 0

		# structureChanged signature: node, parent, event code
		# fires on the affected parent and on its root
		self.structureChanged = Signal()
		self.signals = (self.structureChanged, )

	@property
	def value(self):
		return self._value

	@property
	def parent(self)->Optional[TreeNode]:
		if self._parentRef is None:
			return None
		return self._parentRef()

	@property
	def children(self)->Tuple[TreeNode, ...]:
		return tuple(self._children)

	@property
	def depth(self)->int:
		return self._depth

	@property
	def root(self)->TreeNode:
		node = self
		while node.parent is not None:
			node = node.parent
		return node

	@property
	def siblings(self)->List[TreeNode]:
		parent = self.parent
		if parent is None:
			return []
		return [i for i in parent._children if i is not self]

	@property
	def leaves(self)->List[TreeNode]:
		"""returns nodes under this node
		which do not have children of their own"""
		return [i for i in self.allNodes(False) if not i._children]

	@property
	def address(self)->List[int]:
		"""returns list of child indices from root to this node
		does not include root"""
		result = []
		node = self
		while node.parent is not None:
			result.insert(0, node.ownIndex())
			node = node.parent
		return result

	def getChildren(self)->Tuple[TreeNode, ...]:
		""" read-only ordered view of this node's children """
		return self.children

	def getParent(self)->Optional[TreeNode]:
		""" parent node, or None if this node is a root """
		return self.parent

	def getPrintableValue(self)->str:
		return "{}".format(self._value)

	def debug(self, msg, *args):
		if self.debugOn:
			log.debug(msg, *args)

	def activateSignals(self):
		for i in self.signals:
			i.activate()

	def muteSignals(self):
		for i in self.signals:
			i.mute()

	def _emitStructureChanged(self, node, event):
		""" called on the affected parent """
		self.structureChanged(node, self, event)
		root = self.root
		if root is not self:
			root.structureChanged(node, self, event)

	def _setParent(self, parent:Optional[TreeNode]):
		"""sets or clears the weak parent reference only -
		children lists and depth are left to the caller"""
		if parent is None:
			self._parentRef = None
			return
		selfRef = weakref.ref(self)

		def _onParentLost(ref):
			# parent collected while this node is still held elsewhere
			node = selfRef()
			if node is None or node._parentRef is not ref:
				return
			node._parentRef = None
			node._depth = 0
			propagateDepth((node, ))

		self._parentRef = weakref.ref(parent, _onParentLost)

	def _removeChild(self, node:TreeNode):
		""" identity removal, equal values are not the same node """
		self._children = [i for i in self._children if i is not node]

	@classmethod
	def _validateCandidates(cls, parent:TreeNode, children:List[TreeNode]):
		""" raises without touching anything if any candidate
		cannot be attached to parent """
		for child in [parent] + children:
			if not isinstance(child, TreeNode):
				raise TypeError("{} is not a TreeNode".format(child))

		attached = []
		seen = set()
		for i, child in enumerate(children):
			# a repeat in the batch would be attached by its first occurrence
			if child.parent is not None or id(child) in seen:
				attached.append((i, child))
			seen.add(id(child))
		if attached:
			parent.debug("rejected attached candidates %s under %r",
			             [i for i, _ in attached], parent)
			raise AlreadyAttachedError([i for i, _ in attached],
			                           [n for _, n in attached])

		# parentless candidates can only form a cycle as parent's root
		root = parent.root
		cyclic = [(i, child) for i, child in enumerate(children)
		          if child is root]
		if cyclic:
			parent.debug("rejected cyclic candidates %s under %r",
			             [i for i, _ in cyclic], parent)
			raise CyclicRelationshipError([i for i, _ in cyclic],
			                              [n for _, n in cyclic])

	@classmethod
	def setRelationship(cls, parent:TreeNode, child:TreeNode)->TreeNode:
		"""appends child to parent's children
		raises AlreadyAttachedError if child already has a parent,
		nothing is changed in that case"""
		cls._validateCandidates(parent, [child])

		child._setParent(parent)
		parent._children.append(child)
		child._depth = parent._depth + 1
		propagateDepth((child, ))

		parent.debug("attached %r to %r", child, parent)
		parent._emitStructureChanged(child, cls.StructureEvents.childAdded)
		return child

	@classmethod
	def setMultipleRelationships(cls, parent:TreeNode,
	                             children:Iterable[TreeNode])->List[TreeNode]:
		"""appends all children to parent, in order, or none of them

		every candidate is checked before anything is changed -
		AlreadyAttachedError lists the index of every candidate
		that already has a parent, not just the first"""
		children = list(children)
		cls._validateCandidates(parent, children)
		if not children:
			return children

		for child in children:
			child._setParent(parent)
		parent._children.extend(children)
		for child in children:
			child._depth = parent._depth + 1
		propagateDepth(children)

		parent.debug("attached %s children to %r", len(children), parent)
		for child in children:
			parent._emitStructureChanged(child, cls.StructureEvents.childAdded)
		return children

	@classmethod
	def removeNode(cls, node:TreeNode)->TreeNode:
		"""splices out this node only

		with a parent, node's children move up to it, appended
		after its existing children in their original order

		on a root there is nowhere to move them - children are
		orphaned as new roots, and any not held elsewhere are lost
		"""
		parent = node.parent
		if parent is not None:
			promoted = node._children
			node._children = []
			for child in promoted:
				child._setParent(parent)
			parent._removeChild(node)
			parent._children.extend(promoted)
			for child in promoted:
				child._depth = parent._depth + 1
			propagateDepth(promoted)

			node._setParent(None)
			node._depth = 0

			parent.debug("removed %r from %r, promoted %s children",
			             node, parent, len(promoted))
			parent._emitStructureChanged(
				node, cls.StructureEvents.childRemoved)
			for child in promoted:
				parent._emitStructureChanged(
					child, cls.StructureEvents.childrenPromoted)
			return node

		orphans = node._children
		node._children = []
		for child in orphans:
			child._setParent(None)
			child._depth = 0
		propagateDepth(orphans)

		node.debug("orphaned %s children of root %r", len(orphans), node)
		for child in orphans:
			node._emitStructureChanged(child, cls.StructureEvents.childOrphaned)
		return node

	@classmethod
	def removeSubtree(cls, node:TreeNode)->TreeNode:
		"""detaches node from its parent, keeping everything
		beneath it - node becomes the root of its own tree
		no-op on a root"""
		parent = node.parent
		if parent is None:
			return node
		node._setParent(None)
		parent._removeChild(node)
		node._depth = 0
		propagateDepth((node, ))

		parent.debug("detached subtree %r from %r", node, parent)
		parent._emitStructureChanged(node, cls.StructureEvents.childRemoved)
		return node

	def addChild(self, child:TreeNode)->TreeNode:
		return self.setRelationship(self, child)

	def addChildren(self, children:Iterable[TreeNode])->List[TreeNode]:
		return self.setMultipleRelationships(self, children)

	def remove(self)->TreeNode:
		return self.removeNode(self)

	def detach(self)->TreeNode:
		return self.removeSubtree(self)

	def index(self, child:TreeNode=None)->int:
		""" position of given child, or of this node in its parent
		if no child is given - -1 if not found """
		if child is None:
			return self.ownIndex()
		for i, node in enumerate(self._children):
			if node is child:
				return i
		return -1

	def ownIndex(self)->int:
		parent = self.parent
		if parent is None:
			return -1
		return parent.index(self)

	def allNodes(self, includeSelf=True, depthFirst=True)->List[TreeNode]:
		""" returns flat list of all nodes in this subtree,
		depth-first pre-order or breadth-first """
		found = []
		if depthFirst:
			toVisit = [self]
			while toVisit:
				node = toVisit.pop()
				found.append(node)
				toVisit.extend(reversed(node._children))
		else:
			toVisit = deque([self])
			while toVisit:
				node = toVisit.popleft()
				found.append(node)
				toVisit.extend(node._children)
		return found if includeSelf else found[1:]

	def display(self)->str:
		""" indented printable values, one node per line """
		lines = []
		toVisit = [(self, 0)]
		while toVisit:
			node, level = toVisit.pop()
			lines.append(self.indentToken * level + node.getPrintableValue())
			toVisit.extend((i, level + 1) for i in reversed(node._children))
		return "\n".join(lines)

	def __call__(self, *address)->TreeNode:
		""" chained positional lookup
		root(1, 0, 2), root("1.0.2") and root([1, 0], 2) are the same node
		parentToken steps up one level

		IndexError for a missing child, LookupError above a root
		"""
		node = self
		for token in parseAddressTokens(address, self.sep):
			if token == self.parentToken:
				if node.parent is None:
					raise LookupError("{} is a root, it has no parent".format(node))
				node = node.parent
				continue
			try:
				index = int(token)
			except ValueError:
				raise LookupError("invalid address token {}".format(token)) from None
			try:
				node = node._children[index]
			except IndexError:
				raise IndexError("{} has no child at index {}".format(
					node, index)) from None
		return node

	def __iter__(self):
		"""iterate over children"""
		return iter(tuple(self._children))

	def __contains__(self, item):
		""" strict identity check on direct children """
		return any(item is i for i in self._children)

	def __repr__(self):
		return "<{} ({}) : depth {}>".format(
			self.__class__.__name__, self.getPrintableValue(), self._depth)
