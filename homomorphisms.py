'''
homomorphisms between groups, and their brute-force analysis.

every check in this module quantifies exhaustively over finite carriers,
so costs are stated per function. the expensive one is enumerating the
homomorphisms between two groups, which is used both for the mono/epi
probes and for the inverse search in `analyze()`: keep it to groups of
order ≲ 20 (and probes of order ≲ 3 on the other side).
'''

from dataclasses import dataclass
from typing import Optional, Iterator, Any, Callable, Generic, Sequence, TypeVar
import itertools
import logging

from groups import (
	Eq, Group,
	contains, index_of, elements_of, require_finite, cyclic_group, subgroup,
)

logger = logging.getLogger(__name__)

A = TypeVar('A')
B = TypeVar('B')
C = TypeVar('C')

__all__ = [
	'PROBE_ORDERS',
	'Homomorphism', 'Witness', 'Counterexample',
	'make_homomorphism', 'hom', 'analyze',
	'is_homomorphism', 'preserves_identity', 'preserves_inverses',
	'equal_pointwise', 'all_functions', 'all_homomorphisms',
	'is_monomorphism', 'is_epimorphism', 'is_injective', 'is_surjective', 'find_inverse',
	'kernel', 'image', 'image_inclusion', 'corestrict',
	'identity_hom', 'inclusion', 'compose',
	'kernel_congruence', 'is_congruence',
]

PROBE_ORDERS: tuple[int, ...] = (1, 2, 3)
''' orders of the cyclic groups used as test objects for the mono/epi cancellation laws '''


# DATA MODEL
# ----------

class Homomorphism(Generic[A, B]):
	'''
	a map between the carriers of two groups, meant to preserve the operation.

	nothing is enforced at construction: a Homomorphism may well fail the
	law, which is only established by `is_homomorphism()` or `analyze()`.
	source and target are shared references, never copied or modified.

	the analysis (see `Witness`) is attached to the instance the first time
	`analyze()` runs, and reused afterwards.
	'''

	def __init__(self, source: Group[A], target: Group[B], map: Callable[[A], B], name: Optional[str] = None):
		self._source = source
		self._target = target
		self._map = map
		self._name = name
		self._witness: Optional['Witness'] = None

	@property
	def source(self) -> Group[A]:
		return self._source

	@property
	def target(self) -> Group[B]:
		return self._target

	@property
	def map(self) -> Callable[[A], B]:
		return self._map

	@property
	def name(self) -> Optional[str]:
		return self._name

	@property
	def label(self) -> str:
		return self._name or 'f'

	@property
	def witness(self) -> Optional['Witness']:
		''' the attached analysis, or None if `analyze()` hasn't run on this instance '''
		return self._witness

	def __call__(self, x: A) -> B:
		return self._map(x)

	def __repr__(self):
		return f'Homomorphism({self.label}: {self._source.label} → {self._target.label})'

	def table(self) -> tuple[B, ...]:
		''' images of the source's elements, in carrier order '''
		return tuple( self._map(x) for x in elements_of(self._source) )


@dataclass(frozen=True, repr=False)
class Counterexample:
	'''
	evidence that a map is not cancellable: two distinct homomorphisms
	`first` and `second` (from or to the cyclic `probe`) that become equal
	once composed with the map, together with an `element` on which they
	differ.
	'''
	probe: Group
	element: Any
	first: Homomorphism
	second: Homomorphism

	def __repr__(self):
		return f'Counterexample({self.probe.label}, {self.element!r}, {self.first.table()}, {self.second.table()})'


@dataclass(frozen=True)
class Witness:
	'''
	facts derived by `analyze()` for a homomorphism f: G → H.

	for finite groups `is_iso == is_mono and is_epi`. `left_inverse` and
	`right_inverse` are homomorphisms H → G satisfying `g∘f = id` and
	`f∘g = id` respectively, when one exists. the counterexamples are only
	present when the probes found one.
	'''
	is_homomorphism: bool
	is_mono: bool
	is_epi: bool
	is_iso: bool
	left_inverse: Optional[Homomorphism] = None
	right_inverse: Optional[Homomorphism] = None
	image_subgroup: Optional[Group] = None
	kernel_subgroup: Optional[Group] = None
	mono_counterexample: Optional[Counterexample] = None
	epi_counterexample: Optional[Counterexample] = None


def make_homomorphism(source: Group[A], target: Group[B], map: Callable[[A], B], name: Optional[str] = None) -> Homomorphism[A, B]:
	''' plain constructor: no validation, no analysis '''
	return Homomorphism(source, target, map, name)

def hom(source: Group[A], target: Group[B], map: Callable[[A], B], name: Optional[str] = None) -> Homomorphism[A, B]:
	''' smart constructor: builds the map and immediately attaches its analysis '''
	return analyze(make_homomorphism(source, target, map, name))

def _from_table(source: Group[A], target: Group[B], table: Sequence[B], name: Optional[str] = None) -> Homomorphism[A, B]:
	elements, eq = elements_of(source), source.eq
	return Homomorphism(source, target, lambda x: table[index_of(elements, x, eq)], name)


# LAW CHECKER
# -----------

def is_homomorphism(f: Homomorphism) -> bool:
	'''
	decides `f(x * y) == f(x) * f(y)` for all x, y by brute force: O(|G|²)
	applications of the map, operations and equality tests.

	if the source doesn't list its elements the law can't be decided, and
	True is returned: validity is then the caller's responsibility.
	'''
	G, H = f.source, f.target
	if not G.is_finite:
		return True
	for x in G.elements:
		fx = f(x)
		for y in G.elements:
			if not H.eq(f(G.op(x, y)), H.op(fx, f(y))):
				logger.debug('%r fails the law at (%r, %r)', f, x, y)
				return False
	return True

def preserves_identity(f: Homomorphism) -> bool:
	return f.target.eq(f(f.source.identity), f.target.identity)

def preserves_inverses(f: Homomorphism) -> bool:
	''' `f(x⁻¹) == f(x)⁻¹` for every x; True on infinite sources, like `is_homomorphism()` '''
	G, H = f.source, f.target
	if not G.is_finite:
		return True
	return all( H.eq(f(G.inverse(x)), H.inverse(f(x))) for x in G.elements )

def equal_pointwise(domain: Sequence[A], eq: Eq, f: Callable[[A], B], g: Callable[[A], B]) -> bool:
	return all( eq(f(x), g(x)) for x in domain )

def all_functions(domain: Sequence[A], codomain: Sequence[B]) -> Iterator[tuple[B, ...]]:
	'''
	every function domain → codomain, each one as the tuple of images of
	`domain` in order. there are |codomain| ** |domain| of them.
	'''
	return itertools.product(codomain, repeat=len(domain))

def all_homomorphisms(source: Group[A], target: Group[B]) -> list[Homomorphism[A, B]]:
	'''
	every homomorphism source → target, as table-backed maps.

	the result is the same as filtering `all_functions()` by the law, but
	tables are built one value at a time and a partial table is dropped as
	soon as some product between its assigned elements breaks the law. the
	worst case is still O(|target| ** |source|).
	'''
	dom = elements_of(source)
	cod = elements_of(target)
	n = len(dom)
	# product[i][j] is the index of dom[i] * dom[j]
	product = [ [ index_of(dom, source.op(x, y), source.eq) for y in dom ] for x in dom ]
	table: list[Any] = [None] * n
	logger.debug('enumerating homomorphisms %s → %s (%d candidate functions)', source.label, target.label, len(cod) ** n)

	def consistent(k: int) -> bool:
		# every law instance whose highest index is k
		for i in range(k + 1):
			for a, b in ((i, k), (k, i)):
				p = product[a][b]
				if p <= k and not target.eq(table[p], target.op(table[a], table[b])):
					return False
		for i in range(k):
			for j in range(k):
				if product[i][j] == k and not target.eq(table[k], target.op(table[i], table[j])):
					return False
		return True

	def generator(k: int = 0) -> Iterator[tuple]:
		if k == n:
			return (yield tuple(table))
		for value in cod:
			table[k] = value
			if consistent(k):
				yield from generator(k + 1)

	return [ _from_table(source, target, t) for t in generator() ]


# CATEGORICAL PROPERTIES
# ----------------------

def _first_difference(domain: Sequence[A], eq: Eq, f: Callable[[A], B], g: Callable[[A], B]) -> A:
	return next( x for x in domain if not eq(f(x), g(x)) )

def is_monomorphism(f: Homomorphism, probe_orders: Sequence[int] = PROBE_ORDERS) -> tuple[bool, Optional[Counterexample]]:
	'''
	left-cancellability: for every pair of homomorphisms g, h: J → G from a
	cyclic probe J, `f∘g == f∘h` implies `g == h`.

	the probe orders are extended with the orders of the source's elements,
	since a kernel element of order m is only seen by a probe of order m;
	this makes the answer exact for finite groups. cost: for each probe,
	enumerating J → G plus O(#homs² · |J|) comparisons.
	'''
	G, H = f.source, f.target
	xs = require_finite(G, 'is_monomorphism')
	orders = sorted(set(probe_orders) | { G.element_order(x) for x in xs })
	logger.debug('mono probes for %r: orders %s', f, orders)
	for n in orders:
		J = cyclic_group(n)
		for g, h in itertools.combinations(all_homomorphisms(J, G), 2):
			if equal_pointwise(J.elements, H.eq, compose(f, g), compose(f, h)):
				element = _first_difference(J.elements, G.eq, g, h)
				return False, Counterexample(J, element, g, h)
	return True, None

def is_epimorphism(f: Homomorphism, probe_orders: Sequence[int] = PROBE_ORDERS) -> tuple[bool, Optional[Counterexample]]:
	'''
	right-cancellability: for every pair of homomorphisms g, h: H → K into a
	cyclic probe K, `g∘f == h∘f` implies `g == h`.

	cyclic probes only see the abelianisation of the target, so a map that
	survives them is then required to be surjective (epimorphisms of finite
	groups are exactly the surjective homomorphisms); in that case no
	counterexample is reported. cost: enumerating H → K for each probe, at
	most |K| ** |H| candidates.
	'''
	G, H = f.source, f.target
	xs = require_finite(G, 'is_epimorphism')
	ys = require_finite(H, 'is_epimorphism')
	for n in probe_orders:
		K = cyclic_group(n)
		for g, h in itertools.combinations(all_homomorphisms(H, K), 2):
			if equal_pointwise(xs, K.eq, compose(g, f), compose(h, f)):
				element = _first_difference(ys, K.eq, g, h)
				return False, Counterexample(K, element, g, h)
	return is_surjective(f), None

def is_injective(f: Homomorphism) -> bool:
	''' element-level injectivity, O(|G|²) '''
	G, H = f.source, f.target
	xs = require_finite(G, 'is_injective')
	images = [ f(x) for x in xs ]
	for i, j in itertools.combinations(range(len(xs)), 2):
		if H.eq(images[i], images[j]) and not G.eq(xs[i], xs[j]):
			return False
	return True

def is_surjective(f: Homomorphism) -> bool:
	''' element-level surjectivity, O(|G|·|H|) '''
	xs = require_finite(f.source, 'is_surjective')
	ys = require_finite(f.target, 'is_surjective')
	images = [ f(x) for x in xs ]
	return all( contains(images, y, f.target.eq) for y in ys )

def find_inverse(f: Homomorphism[A, B]) -> tuple[Optional[Homomorphism[B, A]], Optional[Homomorphism[B, A]]]:
	'''
	searches the homomorphisms H → G for a left inverse (`g∘f == id_G`) and
	a right inverse (`f∘g == id_H`), stopping at the first two-sided one,
	which is then returned in both positions. costs as `all_homomorphisms(H, G)`.
	'''
	G, H = f.source, f.target
	xs = require_finite(G, 'find_inverse')
	ys = require_finite(H, 'find_inverse')
	left = right = None
	for g in all_homomorphisms(H, G):
		is_left = equal_pointwise(xs, G.eq, compose(g, f), lambda x: x)
		is_right = equal_pointwise(ys, H.eq, compose(f, g), lambda y: y)
		if is_left and is_right:
			logger.debug('%r has two-sided inverse %s', f, g.table())
			return g, g
		if is_left and left is None:
			left = g
		if is_right and right is None:
			right = g
	return left, right


# ANALYSIS
# --------

def analyze(f: Homomorphism[A, B], probe_orders: Sequence[int] = PROBE_ORDERS, refresh: bool = False) -> Homomorphism[A, B]:
	'''
	computes the `Witness` of `f` and attaches it to the instance, which is
	returned. if a witness is already attached it's reused, unless `refresh`
	is set, in which case it is recomputed and replaced as a whole.

	maps failing the law are not arrows of the category of groups, so they
	get `is_mono = is_epi = is_iso = False` without running the probes.
	kernel and image are computed in every case.

	raises InfiniteGroupError if either group has no element listing.
	'''
	if f.witness is not None and not refresh:
		return f
	require_finite(f.source, 'analyze')
	require_finite(f.target, 'analyze')

	is_hom = is_homomorphism(f)
	is_mono = is_epi = False
	mono_cx = epi_cx = None
	left = right = None
	if is_hom:
		is_mono, mono_cx = is_monomorphism(f, probe_orders)
		is_epi, epi_cx = is_epimorphism(f, probe_orders)
		left, right = find_inverse(f)

	witness = Witness(
		is_homomorphism=is_hom,
		is_mono=is_mono,
		is_epi=is_epi,
		is_iso=left is not None and right is not None,
		left_inverse=left,
		right_inverse=right,
		image_subgroup=_image(f),
		kernel_subgroup=_kernel(f),
		mono_counterexample=mono_cx,
		epi_counterexample=epi_cx,
	)
	assert witness.is_iso == (is_mono and is_epi), f'inconsistent analysis of {f!r}'
	if f.witness is not None:
		logger.info('replacing witness of %r', f)
	f._witness = witness
	return f


# KERNEL / IMAGE
# --------------

def _kernel(f: Homomorphism[A, B]) -> Group[A]:
	G, H = f.source, f.target
	xs = require_finite(G, 'kernel')
	return subgroup(G, [ x for x in xs if H.eq(f(x), H.identity) ], f'ker({f.label})')

def _image(f: Homomorphism[A, B]) -> Group[B]:
	xs = require_finite(f.source, 'image')
	return subgroup(f.target, ( f(x) for x in xs ), f'im({f.label})')

def kernel(f: Homomorphism[A, B]) -> Group[A]:
	'''
	elements of the source mapped to the target's identity, as a group
	sharing the source's operations. for a homomorphism this is always a
	normal subgroup (see `groups.is_normal()`). reuses the attached witness
	if there is one.
	'''
	if f.witness is not None and f.witness.kernel_subgroup is not None:
		return f.witness.kernel_subgroup
	return _kernel(f)

def image(f: Homomorphism[A, B]) -> Group[B]:
	'''
	distinct values attained by the map (under the target's equality), in
	order of first appearance, as a group sharing the target's operations.
	for a homomorphism this is always a subgroup (see `groups.is_subgroup()`).
	'''
	if f.witness is not None and f.witness.image_subgroup is not None:
		return f.witness.image_subgroup
	return _image(f)

def image_inclusion(f: Homomorphism[A, B]) -> Homomorphism[B, B]:
	return inclusion(f.target, image(f))

def corestrict(f: Homomorphism[A, B]) -> Homomorphism[A, B]:
	''' the same map, with its target narrowed to its image (hence surjective) '''
	return Homomorphism(f.source, image(f), f.map, f'{f.label}|im')


# BASIC HOMOMORPHISMS
# -------------------

def identity_hom(group: Group[A]) -> Homomorphism[A, A]:
	return Homomorphism(group, group, lambda x: x, f'id_{group.label}')

def inclusion(group: Group[A], sub: Group[A], name: Optional[str] = None) -> Homomorphism[A, A]:
	''' the inclusion sub ↪ group; `sub` isn't checked to be a subgroup '''
	return Homomorphism(sub, group, lambda x: x, name or f'{sub.label} ↪ {group.label}')

def compose(g: Homomorphism[B, C], f: Homomorphism[A, B], name: Optional[str] = None) -> Homomorphism[A, C]:
	''' `g∘f` (f first). unchecked: f's target is trusted to be g's source '''
	return Homomorphism(f.source, g.target, lambda x: g(f(x)), name or f'{g.label}∘{f.label}')


# CONGRUENCES
# -----------

def kernel_congruence(f: Homomorphism[A, B]) -> Eq:
	''' the kernel pair of f: `x ≈ y` iff `f(x) == f(y)` '''
	eq = f.target.eq
	return lambda x, y: eq(f(x), f(y))

def is_congruence(group: Group[A], rel: Eq) -> bool:
	'''
	checks that `rel` is an equivalence relation compatible with the
	operation on both sides (`x ≈ y` implies `zx ≈ zy` and `xz ≈ yz`).
	O(n³) relation tests.
	'''
	xs = require_finite(group, 'is_congruence')
	op = group.op
	for x in xs:
		if not rel(x, x):
			return False
		for y in xs:
			related = rel(x, y)
			if related != rel(y, x):
				return False
			for z in xs:
				if related and rel(y, z) and not rel(x, z):
					return False
				if related and not (rel(op(z, x), op(z, y)) and rel(op(x, z), op(y, z))):
					return False
	return True
