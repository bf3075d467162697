""" minimal observer, holding its slots weakly """
import inspect
from weakref import WeakSet, WeakKeyDictionary

from nodetree.lib import trimArgsKwargs


class Signal(object):
	""" connected functions and methods are not kept alive by
	the signal - keep your own reference to a slot as long as it
	should fire

	slots accepting fewer arguments than the signal passes are
	called with the trimmed argument list
	"""

	def __init__(self):
		self._functions = WeakSet()
		self._methods = WeakKeyDictionary()
		self._active = True

	def __call__(self, *args, **kwargs):
		if not self._active:
			return
		# Call handler functions
		for func in list(self._functions):
			slotArgs, slotKwargs = trimArgsKwargs(func, args, kwargs)
			func(*slotArgs, **slotKwargs)

		# Call handler methods
		for obj, funcs in list(self._methods.items()):
			for func in list(funcs):
				# unbound function, so trim including the instance
				slotArgs, slotKwargs = trimArgsKwargs(
					func, (obj, ) + args, kwargs)
				func(*slotArgs, **slotKwargs)

	def emit(self, *args, **kwargs):
		""" brings this object up to parity with qt """
		self(*args, **kwargs)

	@property
	def active(self):
		return self._active

	def activate(self):
		self._active = True

	def mute(self):
		self._active = False

	def connect(self, slot):
		if inspect.ismethod(slot):
			if slot.__self__ not in self._methods:
				self._methods[slot.__self__] = set()
			self._methods[slot.__self__].add(slot.__func__)
		else:
			self._functions.add(slot)

	def disconnect(self, slot):
		if inspect.ismethod(slot):
			if slot.__self__ in self._methods:
				self._methods[slot.__self__].discard(slot.__func__)
		else:
			self._functions.discard(slot)

	def clear(self):
		self._functions.clear()
		self._methods.clear()

	def __len__(self):
		return len(self._functions) + sum(
			len(i) for i in self._methods.values())
