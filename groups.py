from typing import Optional, Iterator, Iterable, Any, Callable, Generic, Sequence, TypeVar
import itertools
import logging
import operator
import re

logger = logging.getLogger(__name__)

T = TypeVar('T')
E = TypeVar('E')

def circular_pairwise(x: Iterable[T]) -> Iterator[tuple[T, T]]:
	''' like pairwise, but with a trailing (last, first) entry '''
	x = iter(x)
	start = next(x)
	e1 = start
	for e2 in x:
		yield (e1, e2)
		e1 = e2
	yield (e1, start)

__all__ = [
	'GroupError', 'InfiniteGroupError', 'NotNormalError', 'CosetLookupError', 'NotHomomorphismError',
	'Eq', 'default_eq', 'contains', 'index_of', 'dedupe', 'equal_as_sets',
	'Group', 'elements_of', 'require_finite',
	'cyclic_group', 'trivial_group', 'integers',
	'direct_product', 'semidirect_product', 'dihedral_group', 'klein_four',
	'symmetric_group', 'permutation_from_cycles',
	'subgroup', 'verify_group', 'is_subgroup', 'is_normal',
]


# ERRORS
# ------

class GroupError(Exception):
	''' base class for every error raised by this library '''

class InfiniteGroupError(GroupError, ValueError):
	'''
	a finite-only operation (enumeration, exhaustive law checking, coset
	partitioning...) was requested on a group that doesn't list its elements.
	'''

class NotNormalError(GroupError, ValueError):
	''' a quotient was requested by a subgroup that isn't normal '''

class CosetLookupError(GroupError, RuntimeError):
	'''
	an element could not be located in any coset of a partition. this means
	the subgroup wasn't normal (or wasn't a subgroup at all) or the element
	doesn't belong to the group, and is never expected to happen otherwise.
	'''

class NotHomomorphismError(GroupError, ValueError):
	''' a construction that needs a homomorphism was given a map failing the law '''


# EQUALITY / CARRIER UTILITIES
# ----------------------------

Eq = Callable[[Any, Any], bool]

default_eq: Eq = operator.eq
''' equality used when a group doesn't provide one: plain value equality '''

# FIXME: membership is a linear scan; carriers of hashable values could use a set

def contains(xs: Iterable[T], x: T, eq: Eq = default_eq) -> bool:
	return any(eq(y, x) for y in xs)

def index_of(xs: Sequence[T], x: T, eq: Eq = default_eq) -> int:
	''' like `list.index`, but under a custom equality. raises ValueError if not found '''
	for i, y in enumerate(xs):
		if eq(y, x):
			return i
	raise ValueError(f'{x!r} is not in the carrier')

def dedupe(xs: Iterable[T], eq: Eq = default_eq) -> list[T]:
	''' removes repeated elements, keeping the first occurrence of each '''
	result: list[T] = []
	for x in xs:
		if not contains(result, x, eq):
			result.append(x)
	return result

def equal_as_sets(xs: Sequence[T], ys: Sequence[T], eq: Eq = default_eq) -> bool:
	''' order-independent comparison of two duplicate-free sequences '''
	return len(xs) == len(ys) and all(contains(ys, x, eq) for x in xs)


# GROUP
# -----

class Group(Generic[E]):
	'''
	a group given by its operations plus, when it is finite, a full listing
	of its carrier.

	`elements` is None for infinite (abstract) groups; such groups can still
	be used as the source or target of a map, but every operation that needs
	to enumerate them raises `InfiniteGroupError`.

	nothing is validated at construction time: associativity, closure,
	identity and inverse laws are assumed, and can be checked explicitly
	with `verify_group()`. `eq` must be an equivalence relation consistent
	with `op`; it defaults to value equality.

	instances are never mutated after construction, so they can be shared
	freely between homomorphisms, subgroups and quotients.
	'''

	def __init__(
		self,
		elements: Optional[Iterable[E]],
		op: Callable[[E, E], E],
		identity: E,
		inverse: Callable[[E], E],
		eq: Optional[Eq] = None,
		name: Optional[str] = None,
	):
		self._elements = None if elements is None else tuple(elements)
		self._op = op
		self._identity = identity
		self._inverse = inverse
		self._eq = default_eq if eq is None else eq
		self._name = name

	@property
	def elements(self) -> Optional[tuple[E, ...]]:
		''' the carrier, in a fixed order, or None if the group is infinite '''
		return self._elements

	@property
	def op(self) -> Callable[[E, E], E]:
		return self._op

	@property
	def identity(self) -> E:
		return self._identity

	@property
	def inverse(self) -> Callable[[E], E]:
		return self._inverse

	@property
	def eq(self) -> Eq:
		return self._eq

	@property
	def name(self) -> Optional[str]:
		return self._name

	@property
	def label(self) -> str:
		''' name used in diagnostics and derived names '''
		return self._name or 'G'

	@property
	def is_finite(self) -> bool:
		return self._elements is not None

	@property
	def order(self) -> int:
		''' amount of elements of the group; raises InfiniteGroupError if it isn't listed '''
		return len(elements_of(self))

	def __bool__(self) -> bool:
		# the default implementation would call len(), which raises for infinite groups
		return True

	def __len__(self) -> int:
		return self.order

	def __iter__(self) -> Iterator[E]:
		return iter(elements_of(self))

	def __repr__(self):
		if self._elements is None:
			return f'Group({self.label}, infinite)'
		return f'Group({self.label}, order={len(self._elements)})'

	# carrier queries

	def contains(self, x: E) -> bool:
		return contains(elements_of(self), x, self._eq)

	def index(self, x: E) -> int:
		return index_of(elements_of(self), x, self._eq)

	# derived operations

	def mul(self, *xs: E) -> E:
		''' left-to-right product of any amount of elements (identity if none) '''
		result = self._identity
		for x in xs:
			result = self._op(result, x)
		return result

	def pow(self, x: E, k: int) -> E:
		'''
		raises an element to an integer power (may be negative), using
		exponentiation by squaring after inverting the base for negative
		exponents.
		'''
		if k < 0:
			x = self._inverse(x)
			k = -k
		result = self._identity
		mult = x
		while True:
			if k & 1: result = self._op(result, mult)
			k >>= 1
			if not k: break
			mult = self._op(mult, mult)
		return result

	def conj(self, g: E, x: E) -> E:
		''' conjugate `x` by `g`: equivalent to `g * x * g⁻¹` '''
		return self._op(self._op(g, x), self._inverse(g))

	def comm(self, a: E, b: E) -> E:
		''' commutator: equivalent to `a⁻¹ * b⁻¹ * a * b` '''
		return self.mul(self._inverse(a), self._inverse(b), a, b)

	def element_order(self, x: E) -> int:
		'''
		lowest non-zero natural `k` satisfying `x ** k == identity`. only
		defined for finite groups, where it is bounded by the group's order.
		'''
		bound = self.order
		y, k = x, 1
		while not self._eq(y, self._identity):
			if k >= bound:
				raise ValueError(f'{x!r} has no finite order in {self.label}; is the operation closed?')
			y = self._op(y, x)
			k += 1
		return k


def elements_of(group: Group[E]) -> tuple[E, ...]:
	''' the carrier of a finite group; raises InfiniteGroupError for infinite ones '''
	if group.elements is None:
		raise InfiniteGroupError(f'group {group.label} has no element listing')
	return group.elements

def require_finite(group: Group, what: str) -> tuple:
	''' precondition check for operations that enumerate a group '''
	if group.elements is None:
		raise InfiniteGroupError(f'{what} needs a finite group, but {group.label} has no element listing')
	return group.elements


# FACTORIES
# ---------

def cyclic_group(n: int) -> Group[int]:
	''' finite cyclic group Z/nZ, over the naturals `0 .. n-1` under addition mod n '''
	assert isinstance(n, int) and n > 0, f'order {n!r} is not a positive integer'
	return Group(
		range(n),
		lambda a, b: (a + b) % n,
		0,
		lambda a: -a % n,
		name=f'Z{n}',
	)

def trivial_group() -> Group[int]:
	group = cyclic_group(1)
	return Group(group.elements, group.op, group.identity, group.inverse, name='1')

def integers() -> Group[int]:
	''' the (infinite) additive group of the integers; has no element listing '''
	return Group(None, operator.add, 0, operator.neg, name='Z')

def direct_product(*parts: Group) -> Group[tuple]:
	'''
	direct product of groups, with tuple shape and componentwise operations.

	the carrier is enumerated in lexicographical order over the carriers of
	the parts, and is absent if any of the parts is infinite.
	'''
	assert parts, 'a direct product needs at least one part'
	if all(g.is_finite for g in parts):
		elements = itertools.product(*( g.elements for g in parts ))
	else:
		elements = None
	return Group(
		elements,
		lambda a, b: tuple( g.op(x, y) for g, x, y in zip(parts, a, b) ),
		tuple( g.identity for g in parts ),
		lambda a: tuple( g.inverse(x) for g, x in zip(parts, a) ),
		lambda a, b: all( g.eq(x, y) for g, x, y in zip(parts, a, b) ),
		' × '.join(g.label for g in parts),
	)

def semidirect_product(n_group: Group, h_group: Group, action: Callable[[Any, Any], Any], name: Optional[str] = None) -> Group[tuple]:
	'''
	(outer) semidirect product N ⋊ H, as `(n, h)` pairs.

	`action(h, n)` is the curried form of the H → Aut(N) homomorphism that
	characterises the product; the operation is

		(n1, h1) * (n2, h2) = (n1 * action(h1, n2), h1 * h2)
	'''
	N, H = n_group, h_group
	if N.is_finite and H.is_finite:
		elements = itertools.product(N.elements, H.elements)
	else:
		elements = None

	def op(a, b):
		return ( N.op(a[0], action(a[1], b[0])), H.op(a[1], b[1]) )

	def inverse(a):
		hinv = H.inverse(a[1])
		return ( action(hinv, N.inverse(a[0])), hinv )

	return Group(
		elements, op, (N.identity, H.identity), inverse,
		lambda a, b: N.eq(a[0], b[0]) and H.eq(a[1], b[1]),
		name or f'{N.label} ⋊ {H.label}',
	)

def dihedral_group(n: int) -> Group[tuple[int, int]]:
	'''
	dihedral group of order 2n (symmetries of the regular n-gon), built as
	Z/n ⋊ Z/2 with the flip acting by negation.

	element `(k, 0)` is the rotation r^k and `(k, 1)` is the reflection r^k s.
	'''
	rotations = cyclic_group(n)
	flips = cyclic_group(2)
	action = lambda h, k: rotations.inverse(k) if h else k
	return semidirect_product(rotations, flips, action, name=f'D{n}')

def klein_four() -> Group[tuple[int, int]]:
	''' the Klein four-group, as Z/2 × Z/2 '''
	z2 = cyclic_group(2)
	group = direct_product(z2, z2)
	return Group(group.elements, group.op, group.identity, group.inverse, group.eq, 'V4')

def symmetric_group(n: int) -> Group[tuple[int, ...]]:
	'''
	symmetric group over N_n, with permutations stored as tuples of indices.

	the implemented operation follows usual left action notation, meaning
	`op(a, b)` is the composition `a ∘ b` of their associated functions (b
	is performed first, then a). elements are listed in lexicographical
	order, so the identity comes first.
	'''
	assert isinstance(n, int) and n >= 0, f'size {n!r} is not a natural'

	def inverse(a: tuple[int, ...]) -> tuple[int, ...]:
		result = [-1] * n
		for i, j in enumerate(a):
			result[j] = i
		return tuple(result)

	return Group(
		itertools.permutations(range(n)),
		lambda a, b: tuple( a[j] for j in b ),
		tuple(range(n)),
		inverse,
		name=f'S{n}',
	)

def permutation_from_cycles(n: int, *cycles: Iterable[int]) -> tuple[int, ...]:
	'''
	construct an element of `symmetric_group(n)` from disjoint cycles.
	points not mentioned in any cycle are fixed.
	'''
	result = [-1] * n
	for cycle in cycles:
		for i, j in circular_pairwise(cycle):
			assert isinstance(i, int) and 0 <= i < n and result[i] == -1
			result[i] = j
	return tuple( i if j == -1 else j for i, j in enumerate(result) )

def subgroup(group: Group[E], elements: Iterable[E], name: Optional[str] = None) -> Group[E]:
	'''
	induced group over a subset of `group`'s carrier, sharing its operation,
	identity, inverse and equality. duplicates (under `group.eq`) are dropped.

	the subgroup axioms are not checked; see `is_subgroup()`.
	'''
	return Group(dedupe(elements, group.eq), group.op, group.identity, group.inverse, group.eq, name)


# PREDICATES
# ----------

def verify_group(group: Group) -> bool:
	'''
	brute-force check of the group axioms over the carrier: closure and
	associativity of `op` (O(n³)), two-sided identity and two-sided inverses.
	'''
	xs = require_finite(group, 'verify_group')
	op, eq, e = group.op, group.eq, group.identity
	if not contains(xs, e, eq):
		return False
	for a in xs:
		if not (eq(op(e, a), a) and eq(op(a, e), a)):
			return False
		ainv = group.inverse(a)
		if not contains(xs, ainv, eq):
			return False
		if not (eq(op(a, ainv), e) and eq(op(ainv, a), e)):
			return False
		for b in xs:
			ab = op(a, b)
			if not contains(xs, ab, eq):
				return False
			for c in xs:
				if not eq(op(ab, c), op(a, op(b, c))):
					return False
	return True

def is_subgroup(group: Group[E], sub: Group[E]) -> bool:
	'''
	checks that `sub`'s carrier is contained in `group`'s and is closed under
	`group`'s operation and inverse, and contains its identity. O(|sub|²).
	'''
	xs = require_finite(group, 'is_subgroup')
	ys = require_finite(sub, 'is_subgroup')
	eq = group.eq
	if not all(contains(xs, y, eq) for y in ys):
		return False
	if not contains(ys, group.identity, eq):
		return False
	for a in ys:
		if not contains(ys, group.inverse(a), eq):
			return False
		for b in ys:
			if not contains(ys, group.op(a, b), eq):
				return False
	return True

def is_normal(group: Group[E], sub: Group[E]) -> bool:
	'''
	checks that `sub` is closed under conjugation by every element of `group`:
	`g * n * g⁻¹ ∈ sub` for all g, n. O(|group|·|sub|²) equality tests.

	`sub` is assumed to be a subgroup.
	'''
	xs = require_finite(group, 'is_normal')
	ys = require_finite(sub, 'is_normal')
	for g in xs:
		for n in ys:
			x = group.conj(g, n)
			if not contains(ys, x, group.eq):
				logger.debug('%s is not normal in %s: %r conjugated by %r gives %r', sub.label, group.label, n, g, x)
				return False
	return True


# AUTOMAGICAL GROUP CREATION
# --------------------------

PREFIXES: dict[str, Callable[[int], Group]] = {
	'Z': cyclic_group,
	'S': symmetric_group,
	'D': dihedral_group,
}

V4 = klein_four()

def __getattr__(name: str):
	if (m := re.fullmatch(r'(\D+)(\d+)', name)) and (t := PREFIXES.get(m.group(1))) != None:
		group = t(int(m.group(2)))
		globals()[name] = group
		return group
	raise AttributeError(f'module {__name__!r} has no attribute {name!r}')
