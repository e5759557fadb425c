import itertools
import logging

import pytest

import groups
from groups import *
from homomorphisms import *
from quotients import *

Z1, Z2, Z3, Z4, Z5, Z6, Z12 = map(cyclic_group, (1, 2, 3, 4, 5, 6, 12))
S3 = symmetric_group(3)
D3 = dihedral_group(3)
D4 = dihedral_group(4)

A3 = subgroup(S3, [(0, 1, 2), (1, 2, 0), (2, 0, 1)], 'A3')
T = subgroup(S3, [(0, 1, 2), (1, 0, 2)], 'T')  # generated by a transposition, not normal

def sign(p: tuple[int, ...]) -> int:
	return sum(1 for i, j in itertools.combinations(range(len(p)), 2) if p[i] > p[j]) % 2

def sample_homs() -> list[Homomorphism]:
	''' fresh (unanalyzed) homomorphisms covering every combination of mono/epi '''
	Z2xZ3 = direct_product(Z2, Z3)
	return [
		make_homomorphism(Z6, Z3, lambda x: x % 3, 'mod3'),
		make_homomorphism(Z4, Z2, lambda x: x % 2, 'mod2'),
		identity_hom(Z5),
		make_homomorphism(Z6, Z6, lambda x: 2 * x % 6, 'double'),
		make_homomorphism(Z3, Z6, lambda x: 2 * x % 6, 'embed'),
		make_homomorphism(S3, Z2, sign, 'sign'),
		inclusion(S3, A3),
		make_homomorphism(D3, Z2, lambda x: x[1], 'flip'),
		make_homomorphism(groups.V4, Z2, lambda x: x[0], 'pr1'),
		make_homomorphism(Z4, Z1, lambda x: 0, 'trivial'),
		make_homomorphism(Z2xZ3, Z6, lambda x: (3 * x[0] + 2 * x[1]) % 6, 'crt'),
	]


# helpers

def verify_subgroup_closure(group: Group, sub: Group):
	eq = group.eq
	assert contains(sub.elements, group.identity, eq)
	for a in sub:
		assert contains(sub.elements, group.inverse(a), eq)
		for b in sub:
			assert contains(sub.elements, group.op(a, b), eq)

def verify_normal(group: Group, sub: Group):
	for g in group:
		for n in sub:
			assert contains(sub.elements, group.mul(g, n, group.inverse(g)), group.eq)

def verify_partition(group: Group, sub: Group, classes: list):
	eq = group.eq
	covered = [ x for c in classes for x in c.members ]
	assert equal_as_sets(covered, group.elements, eq)
	assert len(covered) == len(group)
	for c1, c2 in itertools.combinations(classes, 2):
		assert not any(contains(c2.members, x, eq) for x in c1.members)
	for c in classes:
		assert len(c) == len(sub)
		assert contains(c.members, c.representative, eq)
		assert equal_as_sets(c.members, left_coset(group, sub, c.representative).members, eq)


# groups

def test_factories_are_groups():
	candidates = [
		*map(cyclic_group, range(1, 8)),
		trivial_group(), S3, symmetric_group(4), D3, D4, groups.V4,
		direct_product(Z2, Z3), direct_product(Z2, Z2, Z2),
		A3, subgroup(D4, [ (k, 0) for k in range(4) ]),
	]
	for G in candidates:
		assert verify_group(G), G

def test_verify_group_rejects_non_groups():
	mult3 = Group(range(3), lambda a, b: a * b % 3, 1, lambda a: a, name='mult3')
	assert not verify_group(mult3)
	not_closed = Group([0, 1], lambda a, b: a + b, 0, lambda a: -a, name='not_closed')
	assert not verify_group(not_closed)

def test_orders_and_carriers():
	assert len(Z6) == Z6.order == 6
	assert list(Z6) == [0, 1, 2, 3, 4, 5]
	assert S3.order == 6 and S3.elements[0] == S3.identity == (0, 1, 2)
	assert D4.order == 8
	assert direct_product(Z2, Z3).elements == ((0, 0), (0, 1), (0, 2), (1, 0), (1, 1), (1, 2))
	assert groups.V4.order == 4

def test_powers_and_element_orders():
	S4 = symmetric_group(4)
	for a in S4:
		for k in range(-5, 6):
			expected = S4.identity
			step = a if k >= 0 else S4.inverse(a)
			for _ in range(abs(k)):
				expected = S4.op(expected, step)
			assert S4.pow(a, k) == expected
	assert Z6.pow(1, 4) == 4
	assert Z6.pow(1, -1) == 5
	assert Z6.pow(5, 0) == 0
	assert [ Z6.element_order(x) for x in Z6 ] == [1, 6, 3, 2, 3, 6]
	assert S3.element_order((1, 2, 0)) == 3
	assert D4.element_order((1, 0)) == 4
	assert D4.element_order((1, 1)) == 2

def test_dihedral_is_not_abelian():
	assert D3.op((1, 0), (0, 1)) == (1, 1)
	assert D3.op((0, 1), (1, 0)) == (2, 1)
	assert D3.comm((1, 0), (0, 1)) != D3.identity

def test_permutations_from_cycles():
	assert permutation_from_cycles(3, [0, 1]) == (1, 0, 2)
	assert permutation_from_cycles(4, [0, 1, 2, 3]) == (1, 2, 3, 0)
	assert permutation_from_cycles(4) == (0, 1, 2, 3)
	S4 = symmetric_group(4)
	a = permutation_from_cycles(4, [0, 1, 2, 3])
	assert S4.pow(a, 4) == S4.identity
	for g in S4:
		assert S4.conj(g, a) == S4.mul(g, a, S4.inverse(g))

def test_automagic_names():
	assert groups.Z6 is groups.Z6
	assert groups.Z6.order == 6 and groups.Z6.name == 'Z6'
	assert groups.S3.order == 6
	assert groups.D4.order == 8
	with pytest.raises(AttributeError):
		groups.Q8

def test_subgroup_predicates():
	assert is_subgroup(S3, A3) and is_subgroup(S3, T)
	assert is_normal(S3, A3)
	assert not is_normal(S3, T)
	assert not is_subgroup(Z6, subgroup(Z6, [0, 1]))
	assert not is_subgroup(Z6, subgroup(Z6, [1, 2, 3, 4, 5]))
	assert subgroup(Z6, [0, 3, 3, 0]).elements == (0, 3)

def test_non_normal_is_logged(caplog):
	with caplog.at_level(logging.DEBUG, logger='groups'):
		assert not is_normal(S3, T)
	assert 'is not normal in S3' in caplog.text

def test_infinite_groups():
	Z = integers()
	assert not Z.is_finite
	with pytest.raises(InfiniteGroupError):
		Z.order
	with pytest.raises(InfiniteGroupError):
		list(Z)
	assert issubclass(InfiniteGroupError, ValueError)

	f = make_homomorphism(Z, Z3, lambda x: x % 3, 'mod3')
	assert is_homomorphism(f)
	for op in (kernel, image, analyze, first_isomorphism):
		with pytest.raises(InfiniteGroupError):
			op(f)
	with pytest.raises(InfiniteGroupError):
		verify_group(Z)
	with pytest.raises(InfiniteGroupError):
		quotient(Z, subgroup(Z3, [0]))


# law checker

def test_law_matches_ground_truth():
	for G, H in [(Z4, Z2), (Z2, S3), (Z3, Z3), (groups.V4, Z2)]:
		found = []
		for table in all_functions(G.elements, H.elements):
			f = make_homomorphism(G, H, lambda x, table=table: table[G.index(x)])
			truth = all(
				H.eq(f(G.op(x, y)), H.op(f(x), f(y)))
				for x in G for y in G
			)
			assert is_homomorphism(f) == truth
			if truth:
				found.append(table)
		assert [ h.table() for h in all_homomorphisms(G, H) ] == found

def test_homomorphism_counts():
	assert len(all_homomorphisms(Z4, Z2)) == 2
	assert len(all_homomorphisms(Z6, Z6)) == 6
	assert len(all_homomorphisms(Z2, S3)) == 4
	assert len(all_homomorphisms(S3, Z3)) == 1
	assert len(all_homomorphisms(S3, Z2)) == 2
	assert len(all_homomorphisms(Z2, groups.V4)) == 4
	assert len(all_homomorphisms(groups.V4, Z2)) == 4

def test_analyze_reports_non_homomorphisms():
	shift = hom(Z3, Z3, lambda x: (x + 1) % 3, 'shift')
	w = shift.witness
	assert not w.is_homomorphism
	assert not (w.is_mono or w.is_epi or w.is_iso)
	assert not preserves_identity(shift)
	assert w.kernel_subgroup.elements == (2,)
	assert w.image_subgroup.elements == (1, 2, 0)

def test_identity_and_inverse_preservation():
	for f in sample_homs():
		assert preserves_identity(f), f
		assert preserves_inverses(f), f
	flip_sign = make_homomorphism(Z3, Z3, lambda x: 0 if x == 0 else 1)
	assert preserves_identity(flip_sign)
	assert not preserves_inverses(flip_sign)
	assert not is_homomorphism(flip_sign)


# scenarios

def test_mod3_on_z6():
	f = hom(Z6, Z3, lambda x: x % 3, 'mod3')
	assert kernel(f).elements == (0, 3)
	assert image(f).elements == (0, 1, 2)
	assert kernel(f).name == 'ker(mod3)'
	Q = quotient(Z6, kernel(f))
	assert len(Q) == 3
	assert [ c.members for c in Q ] == [(0, 3), (1, 4), (2, 5)]
	iso = first_isomorphism(f)
	assert iso.left_inverse_holds and iso.right_inverse_holds

def test_mod2_on_z4():
	f = hom(Z4, Z2, lambda x: x % 2, 'mod2')
	w = f.witness
	assert w.is_homomorphism
	assert (w.is_mono, w.is_epi, w.is_iso) == (False, True, False)
	assert w.kernel_subgroup.elements == (0, 2)
	assert w.image_subgroup.elements == (0, 1)
	assert w.left_inverse is None and w.right_inverse is None
	assert w.epi_counterexample is None

	cx = w.mono_counterexample
	assert cx is not None and cx.probe.order == 2
	assert cx.first.target is Z4
	assert cx.first(cx.element) != cx.second(cx.element)
	assert equal_pointwise(cx.probe.elements, Z2.eq, compose(f, cx.first), compose(f, cx.second))

def test_identity_on_z5():
	f = analyze(identity_hom(Z5))
	w = f.witness
	assert w.is_mono and w.is_epi and w.is_iso
	assert kernel(f).elements == (0,)
	assert image(f).elements == (0, 1, 2, 3, 4)
	assert w.left_inverse is w.right_inverse
	assert w.left_inverse.table() == (0, 1, 2, 3, 4)
	assert w.mono_counterexample is None and w.epi_counterexample is None

def test_one_sided_inverses():
	embed = hom(Z3, Z6, lambda x: 2 * x % 6, 'embed')
	w = embed.witness
	assert w.is_mono and not w.is_epi
	assert w.right_inverse is None
	retraction = w.left_inverse
	assert retraction is not None
	assert all( retraction(embed(x)) == x for x in Z3 )

	flip = hom(D3, Z2, lambda x: x[1], 'flip')
	w = flip.witness
	assert w.is_epi and not w.is_mono
	assert w.left_inverse is None
	section = w.right_inverse
	assert section is not None
	assert all( flip(section(y)) == y for y in Z2 )

def test_epi_counterexample_from_probe():
	f = analyze(inclusion(S3, A3))
	w = f.witness
	assert w.is_mono and not w.is_epi and not w.is_iso
	cx = w.epi_counterexample
	assert cx is not None and cx.probe.order == 2
	assert cx.first.source is S3
	assert cx.first(cx.element) != cx.second(cx.element)
	assert equal_pointwise(A3.elements, cx.probe.eq, compose(cx.first, f), compose(cx.second, f))

def test_epi_beyond_the_probes():
	# no cyclic probe separates maps out of S3 that agree on T, surjectivity does
	f = analyze(inclusion(S3, T))
	assert not f.witness.is_epi
	assert f.witness.epi_counterexample is None
	assert not is_surjective(f)

def test_mono_probes_cover_large_kernels():
	f = analyze(make_homomorphism(Z5, Z1, lambda x: 0, 'collapse'))
	w = f.witness
	assert not w.is_mono and w.is_epi
	assert w.mono_counterexample.probe.order == 5

def test_iso_is_mono_and_epi():
	for f in sample_homs():
		w = analyze(f).witness
		assert w.is_homomorphism, f
		assert w.is_iso == (w.is_mono and w.is_epi), f
		assert w.is_mono == is_injective(f), f
		assert w.is_epi == is_surjective(f), f
		if w.mono_counterexample:
			cx = w.mono_counterexample
			assert not f.source.eq(cx.first(cx.element), cx.second(cx.element))
			assert equal_pointwise(cx.probe.elements, f.target.eq, compose(f, cx.first), compose(f, cx.second))

def test_analyze_is_idempotent():
	f = hom(Z4, Z2, lambda x: x % 2, 'mod2')
	first = f.witness
	assert analyze(f) is f
	assert f.witness is first

	analyze(f, refresh=True)
	second = f.witness
	assert second is not first
	for field in ('is_homomorphism', 'is_mono', 'is_epi', 'is_iso'):
		assert getattr(first, field) == getattr(second, field)
	assert first.kernel_subgroup.elements == second.kernel_subgroup.elements
	assert first.image_subgroup.elements == second.image_subgroup.elements
	assert first.mono_counterexample.first.table() == second.mono_counterexample.first.table()

def test_custom_probe_orders():
	f = analyze(make_homomorphism(Z4, Z2, lambda x: x % 2), probe_orders=(1,))
	# element orders of the source still expose the kernel
	assert not f.witness.is_mono
	assert f.witness.is_epi


# kernel / image

def test_kernel_is_normal_and_image_is_subgroup():
	for f in sample_homs():
		K, Im = kernel(f), image(f)
		assert is_subgroup(f.source, K), f
		verify_subgroup_closure(f.source, K)
		verify_normal(f.source, K)
		assert is_normal(f.source, K), f
		assert is_subgroup(f.target, Im), f
		verify_subgroup_closure(f.target, Im)
		assert all( f.target.eq(f(x), f.target.identity) for x in K )
		assert len(K) * len(Im) == len(f.source)

def test_kernel_and_image_reuse_witness():
	f = hom(Z6, Z3, lambda x: x % 3)
	assert kernel(f) is f.witness.kernel_subgroup
	assert image(f) is f.witness.image_subgroup
	g = make_homomorphism(Z6, Z3, lambda x: x % 3)
	assert kernel(g) is not kernel(g)
	assert kernel(g).elements == kernel(f).elements

def test_edge_homomorphisms():
	trivial = make_homomorphism(S3, Z2, lambda x: 0, 'trivial')
	assert kernel(trivial).elements == S3.elements
	assert image(trivial).elements == (0,)
	ident = identity_hom(S3)
	assert kernel(ident).elements == (S3.identity,)
	assert image(ident).elements == S3.elements

def test_corestriction_and_inclusion():
	f = make_homomorphism(Z3, Z6, lambda x: 2 * x % 6, 'embed')
	onto = corestrict(f)
	assert onto.target.elements == (0, 2, 4)
	assert is_surjective(onto) and not is_surjective(f)
	incl = image_inclusion(f)
	assert incl.source.elements == (0, 2, 4) and incl.target is Z6
	assert equal_pointwise(Z3.elements, Z6.eq, f, compose(incl, onto))
	assert is_homomorphism(incl)

def test_congruences():
	f = make_homomorphism(Z6, Z3, lambda x: x % 3)
	rel = kernel_congruence(f)
	assert is_congruence(Z6, rel)
	assert rel(1, 4) and not rel(1, 2)
	swap12 = lambda x, y: x == y or {x, y} == {1, 2}
	assert not is_congruence(Z6, swap12)
	near = lambda x, y: abs(x - y) <= 1
	assert not is_congruence(Z6, near)


# cosets / quotients

def test_coset_partitions():
	cases = [
		(Z6, subgroup(Z6, [0, 3])),
		(Z6, subgroup(Z6, [0, 2, 4])),
		(Z6, subgroup(Z6, [0])),
		(Z6, Z6),
		(S3, A3),
		(S3, T),
		(D4, subgroup(D4, [ (k, 0) for k in range(4) ])),
		(groups.V4, subgroup(groups.V4, [(0, 0), (1, 0)])),
	]
	for G, N in cases:
		classes = cosets(G, N)
		assert len(classes) * len(N) == len(G)
		verify_partition(G, N, classes)

def test_quotient_is_a_group():
	for G, N in [(Z6, subgroup(Z6, [0, 3])), (S3, A3), (D4, subgroup(D4, [(0, 0), (2, 0)])), (Z12, subgroup(Z12, [0, 4, 8]))]:
		Q = quotient(G, N)
		assert verify_group(Q), Q
		assert len(Q) * len(N) == len(G)
		assert contains(Q.identity.members, G.identity, G.eq)

def test_quotient_compares_cosets_by_members():
	N = subgroup(Z6, [0, 3])
	Q = quotient(Z6, N)
	other = left_coset(Z6, N, 4)
	assert other.members == (4, 1)
	assert Q.eq(other, Q.elements[1])
	assert not Q.eq(other, Q.elements[2])
	assert Q.eq(Q.op(other, other), Q.elements[2])
	assert Q.eq(Q.inverse(other), Q.elements[2])
	assert Q.contains(other)

def test_quotient_requires_normality():
	with pytest.raises(NotNormalError):
		quotient(S3, T)
	with pytest.raises(NotNormalError):
		quotient(D3, subgroup(D3, [(0, 0), (0, 1)]))
	loose = quotient(S3, T, check=False)
	assert len(loose) == 3

def test_coset_lookup_failures():
	Q = quotient(Z6, subgroup(Z6, [0, 3]))
	with pytest.raises(CosetLookupError):
		coset_of(Q.elements, 7, Z6.eq)
	with pytest.raises(CosetLookupError):
		Q.op(Coset(0.5, (0.5,)), Q.identity)
	assert issubclass(CosetLookupError, RuntimeError)

def test_canonical_projection():
	N = subgroup(D4, [(0, 0), (2, 0)])
	pi = canonical_projection(D4, N)
	assert is_homomorphism(pi)
	assert is_surjective(pi)
	assert equal_as_sets(kernel(pi).elements, N.elements, D4.eq)


# isomorphism theorems

def test_first_isomorphism():
	for f in sample_homs():
		iso = first_isomorphism(f)
		assert iso.holds, f
		assert len(iso.quotient) == len(iso.image)
		assert len(iso.quotient) * len(iso.kernel) == len(f.source)
		assert is_homomorphism(iso.forward) and is_homomorphism(iso.backward)
		assert is_injective(iso.forward) and is_surjective(iso.forward)
		assert equal_pointwise(f.source.elements, f.target.eq, f, compose(iso.injection, iso.projection))
		assert is_injective(iso.injection) and is_surjective(iso.projection)

def test_first_isomorphism_uses_witness():
	f = hom(Z4, Z2, lambda x: x % 2, 'mod2')
	iso = first_isomorphism(f)
	assert iso.kernel is f.witness.kernel_subgroup
	assert iso.image is f.witness.image_subgroup
	assert len(iso.quotient) == 2

def test_first_isomorphism_rejects_non_homomorphisms():
	f = make_homomorphism(Z3, Z3, lambda x: (x + 1) % 3, 'shift')
	with pytest.raises(NotHomomorphismError):
		first_isomorphism(f)
	with pytest.raises(NotHomomorphismError):
		first_isomorphism(analyze(f))

def test_backward_map_outside_image():
	iso = first_isomorphism(make_homomorphism(Z3, Z6, lambda x: 2 * x % 6, 'embed'))
	with pytest.raises(ValueError):
		iso.backward(1)

def test_factor_through_quotient():
	f = make_homomorphism(S3, Z2, sign, 'sign')
	Q, pi, iota = factor_through_quotient(f)
	assert len(Q) == 2
	assert pi.target is Q and iota.source is Q
	assert all( iota(pi(x)) == sign(x) for x in S3 )

def test_second_isomorphism():
	A = subgroup(Z6, [0, 2, 4], 'A')
	N = subgroup(Z6, [0, 3], 'N')
	r = second_isomorphism(Z6, A, N)
	assert r.holds
	assert r.intersection.elements == (0,)
	assert sorted(r.product.elements) == [0, 1, 2, 3, 4, 5]
	assert len(r.quotient) == len(r.product_quotient) == 3
	assert r.via.holds

	r = second_isomorphism(S3, T, A3)
	assert r.holds
	assert r.intersection.elements == (S3.identity,)
	assert equal_as_sets(r.product.elements, S3.elements)
	assert len(r.quotient) == len(r.product_quotient) == 2

	with pytest.raises(NotNormalError):
		second_isomorphism(S3, A3, T)

def test_third_isomorphism():
	K = subgroup(Z12, [0, 6], 'K')
	N = subgroup(Z12, [0, 3, 6, 9], 'N')
	r = third_isomorphism(Z12, K, N)
	assert r.holds
	assert len(r.inner_quotient) == 6
	assert len(r.outer_quotient) == 3
	assert len(r.middle) == 2
	assert len(r.double_quotient) == 3
	assert verify_group(r.double_quotient)

	center = subgroup(D4, [(0, 0), (2, 0)], 'Z')
	rotations = subgroup(D4, [ (k, 0) for k in range(4) ], 'R')
	r = third_isomorphism(D4, center, rotations)
	assert r.holds
	assert (len(r.inner_quotient), len(r.outer_quotient), len(r.double_quotient)) == (4, 2, 2)

	with pytest.raises(ValueError):
		third_isomorphism(Z12, subgroup(Z12, [0, 4, 8]), N)
