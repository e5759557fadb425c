'''
cosets, quotient groups and the isomorphism theorems.

cosets are always left cosets `gN`, and a quotient's elements are `Coset`
objects compared by membership (two cosets reached through different
representatives are equal). building a quotient needs the subgroup to be
normal, which is checked eagerly unless told otherwise.
'''

from dataclasses import dataclass
from typing import Optional, Iterator, Generic, Sequence, TypeVar
import logging

from groups import (
	Eq, Group, NotNormalError, CosetLookupError, NotHomomorphismError,
	contains, dedupe, equal_as_sets, elements_of, require_finite, subgroup, is_normal,
)
from homomorphisms import (
	Homomorphism, is_homomorphism, is_injective, is_surjective,
	kernel, image, inclusion, compose,
)

logger = logging.getLogger(__name__)

E = TypeVar('E')
B = TypeVar('B')

__all__ = [
	'Coset', 'left_coset', 'cosets', 'coset_of',
	'quotient', 'canonical_projection',
	'FirstIsomorphism', 'first_isomorphism', 'factor_through_quotient',
	'SecondIsomorphism', 'second_isomorphism',
	'ThirdIsomorphism', 'third_isomorphism',
]


# COSETS
# ------

@dataclass(frozen=True, eq=False, repr=False)
class Coset(Generic[E]):
	'''
	one class `gN` of the partition of a group by a subgroup N.

	`representative` is the element the class was discovered from, and
	`members` lists the whole class in carrier order. cosets have no notion
	of equality on their own: compare them through the quotient's `eq`.
	'''
	representative: E
	members: tuple[E, ...]

	def __len__(self) -> int:
		return len(self.members)

	def __iter__(self) -> Iterator[E]:
		return iter(self.members)

	def __repr__(self):
		return f'[{self.representative!r}]'

def left_coset(group: Group[E], sub: Group[E], g: E) -> Coset[E]:
	''' the coset `gN`, computed directly as `{ g * n : n ∈ N }` '''
	members = dedupe(( group.op(g, n) for n in elements_of(sub) ), group.eq)
	return Coset(g, tuple(members))

def cosets(group: Group[E], sub: Group[E]) -> list[Coset[E]]:
	'''
	partitions `group`'s carrier into the left cosets of `sub`, in a single
	pass: each element not yet covered becomes the representative of a new
	coset holding every x with `g⁻¹ * x ∈ sub`.

	normality is not needed (nor checked) here; `sub` is assumed to be a
	subgroup. O(|group|²) membership tests, each one a scan of `sub`.
	'''
	xs = require_finite(group, 'cosets')
	ys = require_finite(sub, 'cosets')
	eq = group.eq
	seen = [False] * len(xs)
	result: list[Coset[E]] = []
	for i, g in enumerate(xs):
		if seen[i]:
			continue
		ginv = group.inverse(g)
		members = []
		for j, x in enumerate(xs):
			if contains(ys, group.op(ginv, x), eq):
				members.append(x)
				seen[j] = True
		result.append(Coset(g, tuple(members)))
	logger.debug('partitioned %s into %d cosets of %s', group.label, len(result), sub.label)
	return result

def coset_of(classes: Sequence[Coset[E]], x: E, eq: Eq) -> Coset[E]:
	''' the coset of a partition containing `x`; raises CosetLookupError if there's none '''
	for c in classes:
		if contains(c.members, x, eq):
			return c
	raise CosetLookupError(f'no coset contains {x!r}')


# QUOTIENT
# --------

def quotient(group: Group[E], sub: Group[E], check: bool = True, name: Optional[str] = None) -> Group[Coset[E]]:
	'''
	the quotient group `group / sub`, over the cosets computed by `cosets()`.

	operations act on representatives and look up the coset holding the
	result: `[a] * [b] = [a * b]`, `[a]⁻¹ = [a⁻¹]`, identity `[e]`. this is
	only well defined if `sub` is normal; with `check` (the default) that is
	verified first and NotNormalError is raised otherwise. equality of
	cosets is set equality of their members.

	a failed lookup raises CosetLookupError.
	'''
	require_finite(group, 'quotient')
	require_finite(sub, 'quotient')
	label = name or f'{group.label}/{sub.label}'
	if check and not is_normal(group, sub):
		raise NotNormalError(f'{sub.label} is not normal in {group.label}, {label} is not a group')
	classes = tuple(cosets(group, sub))
	eq = group.eq

	def find(x: E) -> Coset[E]:
		try:
			return coset_of(classes, x, eq)
		except CosetLookupError as e:
			raise CosetLookupError(f'{label}: no coset contains {x!r}; is {sub.label} a normal subgroup?') from e

	return Group(
		classes,
		lambda a, b: find(group.op(a.representative, b.representative)),
		find(group.identity),
		lambda a: find(group.inverse(a.representative)),
		lambda a, b: equal_as_sets(a.members, b.members, eq),
		label,
	)

def canonical_projection(group: Group[E], sub: Group[E], quotient_group: Optional[Group[Coset[E]]] = None) -> Homomorphism[E, Coset[E]]:
	''' the surjection `g ↦ [g]` onto the quotient (built here unless given) '''
	Q = quotient(group, sub) if quotient_group is None else quotient_group
	classes, eq = elements_of(Q), group.eq
	return Homomorphism(group, Q, lambda g: coset_of(classes, g, eq), f'π: {group.label} → {Q.label}')


# FIRST ISOMORPHISM THEOREM
# -------------------------

@dataclass(frozen=True)
class FirstIsomorphism(Generic[E, B]):
	'''
	the isomorphism `G/ker(f) ≅ im(f)` for f: G → H.

	`forward` is `[g] ↦ f(g)` and `backward` sends each image element to
	the coset of its first preimage; the two `*_holds` flags are the
	round-trip checks `backward∘forward == id` and `forward∘backward == id`.
	`projection` (G → G/ker f) and `injection` (G/ker f → H) factor f as
	`injection∘projection`.
	'''
	kernel: Group[E]
	quotient: Group[Coset[E]]
	image: Group[B]
	forward: Homomorphism[Coset[E], B]
	backward: Homomorphism[B, Coset[E]]
	left_inverse_holds: bool
	right_inverse_holds: bool
	projection: Homomorphism[E, Coset[E]]
	injection: Homomorphism[Coset[E], B]

	@property
	def holds(self) -> bool:
		return self.left_inverse_holds and self.right_inverse_holds

def first_isomorphism(f: Homomorphism[E, B]) -> FirstIsomorphism[E, B]:
	'''
	constructs and verifies `G/ker(f) ≅ im(f)`.

	`forward` is well defined because f is constant on each coset of its
	kernel. the maps are checked on every element of the quotient and the
	image. raises NotHomomorphismError if f fails the law (using the attached
	witness when there is one), and InfiniteGroupError if G is infinite.
	'''
	G, H = f.source, f.target
	xs = require_finite(G, 'first_isomorphism')
	is_hom = f.witness.is_homomorphism if f.witness is not None else is_homomorphism(f)
	if not is_hom:
		raise NotHomomorphismError(f'{f!r} is not a homomorphism')

	K = kernel(f)
	Q = quotient(G, K, name=f'{G.label}/{K.label}')
	Im = image(f)
	classes = elements_of(Q)

	forward = Homomorphism(Q, Im, lambda c: f(c.representative), f'φ: {Q.label} → {Im.label}')

	def backward_map(y: B) -> Coset[E]:
		for x in xs:
			if H.eq(f(x), y):
				return coset_of(classes, x, G.eq)
		raise ValueError(f'{y!r} is not in the image of {f.label}')

	backward = Homomorphism(Im, Q, backward_map, f'ψ: {Im.label} → {Q.label}')
	left = all( Q.eq(backward(forward(q)), q) for q in classes )
	right = all( Im.eq(forward(backward(y)), y) for y in elements_of(Im) )
	logger.debug('first isomorphism for %r: |Q| = %d, |im| = %d, left = %s, right = %s', f, len(classes), len(Im), left, right)

	return FirstIsomorphism(
		kernel=K,
		quotient=Q,
		image=Im,
		forward=forward,
		backward=backward,
		left_inverse_holds=left,
		right_inverse_holds=right,
		projection=canonical_projection(G, K, Q),
		injection=Homomorphism(Q, H, lambda c: f(c.representative), f'ι: {Q.label} → {H.label}'),
	)

def factor_through_quotient(f: Homomorphism[E, B]) -> tuple[Group[Coset[E]], Homomorphism[E, Coset[E]], Homomorphism[Coset[E], B]]:
	''' `(G/ker f, π, ι)` with π surjective, ι injective and `f == ι∘π` '''
	iso = first_isomorphism(f)
	return iso.quotient, iso.projection, iso.injection


# SECOND AND THIRD ISOMORPHISM THEOREMS
# -------------------------------------

@dataclass(frozen=True)
class SecondIsomorphism(Generic[E]):
	'''
	`A/(A∩N) ≅ AN/N` for a subgroup A and a normal subgroup N of G.

	`isomorphism` maps `[a]` in A/(A∩N) to the coset of a in AN/N; `via` is
	the first isomorphism theorem applied to `A ↪ G → G/N`, whose kernel is
	A∩N. `holds` records that `isomorphism` is a bijective homomorphism.
	'''
	intersection: Group[E]
	product: Group[E]
	quotient: Group[Coset[E]]
	product_quotient: Group[Coset[E]]
	isomorphism: Homomorphism[Coset[E], Coset[E]]
	via: FirstIsomorphism
	holds: bool

def second_isomorphism(group: Group[E], a_sub: Group[E], n_sub: Group[E]) -> SecondIsomorphism[E]:
	G, A, N = group, a_sub, n_sub
	require_finite(G, 'second_isomorphism')
	xs, ns = elements_of(A), elements_of(N)
	if not is_normal(G, N):
		raise NotNormalError(f'{N.label} is not normal in {G.label}')

	meet = subgroup(G, [ a for a in xs if contains(ns, a, G.eq) ], f'{A.label}∩{N.label}')
	join = subgroup(G, [ G.op(a, n) for a in xs for n in ns ], f'{A.label}{N.label}')

	pi = canonical_projection(G, N)
	via = first_isomorphism(compose(pi, inclusion(G, A), f'π∘ι: {A.label} → {pi.target.label}'))
	join_mod_n = quotient(join, subgroup(join, ns, N.label), name=f'{join.label}/{N.label}')
	classes = elements_of(join_mod_n)
	iso = Homomorphism(
		via.quotient, join_mod_n,
		lambda c: coset_of(classes, c.representative, G.eq),
		f'{via.quotient.label} → {join_mod_n.label}',
	)
	holds = (
		equal_as_sets(elements_of(via.kernel), elements_of(meet), G.eq)
		and is_homomorphism(iso) and is_injective(iso) and is_surjective(iso)
	)
	return SecondIsomorphism(meet, join, via.quotient, join_mod_n, iso, via, holds)

@dataclass(frozen=True)
class ThirdIsomorphism(Generic[E]):
	'''
	`(G/K)/(N/K) ≅ G/N` for normal subgroups K ⊆ N of G.

	`via` is the first isomorphism theorem applied to `G/K → G/N`,
	`gK ↦ gN`, whose kernel is N/K. `holds` records that the round trips
	hold, that the image is all of G/N and that the kernel is N/K.
	'''
	inner_quotient: Group[Coset[E]]
	outer_quotient: Group[Coset[E]]
	middle: Group[Coset[E]]
	double_quotient: Group[Coset[Coset[E]]]
	via: FirstIsomorphism
	holds: bool

def third_isomorphism(group: Group[E], k_sub: Group[E], n_sub: Group[E]) -> ThirdIsomorphism[E]:
	G, K, N = group, k_sub, n_sub
	require_finite(G, 'third_isomorphism')
	ns = elements_of(N)
	if not all( contains(ns, k, G.eq) for k in elements_of(K) ):
		raise ValueError(f'{K.label} is not contained in {N.label}')

	GK = quotient(G, K)
	GN = quotient(G, N)
	# K ⊆ N, so a coset of K lies in N as soon as its representative does
	NK = subgroup(GK, [ c for c in elements_of(GK) if contains(ns, c.representative, G.eq) ], f'{N.label}/{K.label}')
	double = quotient(GK, NK, name=f'({GK.label})/({NK.label})')

	outer = elements_of(GN)
	theta = Homomorphism(GK, GN, lambda c: coset_of(outer, c.representative, G.eq), f'{GK.label} → {GN.label}')
	via = first_isomorphism(theta)
	holds = (
		via.holds
		and len(via.image) == len(GN)
		and equal_as_sets(elements_of(via.kernel), elements_of(NK), GK.eq)
		and len(double) == len(GN)
	)
	return ThirdIsomorphism(GK, GN, NK, double, via, holds)
