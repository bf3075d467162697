""" python functions used in tree nodes and associated objects"""
import inspect


def trimArgsKwargs(fn, givenArgs, givenKwargs=None):
	""" given function, and tuple and dict of args and kwargs,
	trim args to accepted length, and remove all but accepted kwargs from dict
	for use in signals - some functions just need to trigger
	on specific signals, while others may need more detail information passed
	to them
	"""
	givenKwargs = givenKwargs or {}
	try:
		argSpec = inspect.getfullargspec(fn)
	except TypeError: # builtins may not expose a signature
		return list(givenArgs), dict(givenKwargs)
	if argSpec.varargs:
		args = list(givenArgs)
	else:
		givenArgs = list(givenArgs)
		args = givenArgs[:min(len(argSpec.args), len(givenArgs))]

	if argSpec.varkw:
		kwargs = dict(givenKwargs)
	else:
		accepted = set(argSpec.args[len(args):]) | set(argSpec.kwonlyargs)
		kwargs = {k : v for k, v in givenKwargs.items() if k in accepted}
	return (args, kwargs)


def parseAddressTokens(tokenArgs, sep="."):
	""" returns uniform list from address tokens
	ints are passed through, strings are split on separator,
	lists and tuples are flattened
	:type tokenArgs : tuple"""
	result = []
	for token in tokenArgs:
		if isinstance(token, bool):
			raise TypeError("invalid address token {}".format(token))
		if isinstance(token, int):
			result.append(token)
		elif isinstance(token, str):
			result += [i for i in token.split(sep) if i]
		elif isinstance(token, (list, tuple)):
			result += parseAddressTokens(token, sep)
		else:
			raise TypeError("invalid address token {} of type {}".format(
				token, type(token)))
	return result
