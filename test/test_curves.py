"""
test for all functions in ../DLRAIN/curves_.py
"""

# append DLRAIN to sys
from os.path import dirname
from sys import path
# https://stackoverflow.com/a/248066/5885810
curent_d = dirname(__file__)
path.insert(0, dirname( curent_d ))

# import local libs
from math import exp
from warnings import catch_warnings, simplefilter
from numpy import allclose, array, array_equal, arange, diff, isclose, inf
from numpy.random import default_rng
import pytest

# now import the module
import curves_


# multi-test constants
scene_pars = curves_.curve_pars(plateau=0.1, inflection1=40, rate1=0.2,
                                inflection2=200, rate2=0.06)


class fixed_centres:
    """stand-in random stream returning pre-defined centre days."""

    def __init__(self, centres):
        self.centres = iter(centres)

    def integers(self, low, high, endpoint=False):
        return next(self.centres)


# unitestS start here!
# --------------------
def test_dlogistic():

    test_one = 0.1 / (1 + exp(39 * 0.2)) + 0.9 / (1 + exp(199 * 0.06))

# calling the function
    one = curves_.dlogistic(1, scene_pars)
    end = curves_.dlogistic(366, scene_pars)

    assert allclose(one, test_one) and 0 < one < 1e-3
    assert 0.999 < end < 1
    print('dlogistic ...\t\tmodule curves_.py  runs OK!')


def test_dlogistic_bounds():

    rng = default_rng(42)
    doys = arange(1, 367)

# calling the function (for plenty of 'valid' parameters)
    for _ in range(200):
        pars = curves_.curve_pars(
            rng.uniform(0, 1), rng.uniform(1, 366), rng.uniform(0, 2),
            rng.uniform(1, 366), rng.uniform(0, 2))
        curve = curves_.dlogistic(doys, pars)
        assert (curve >= 0).all() and (curve <= 1).all()
        assert (diff(curve) >= 0).all()
    print('dlogistic (bounds) ...\tmodule curves_.py  runs OK!')


def test_sample_pars():

    rng = default_rng(42)

# calling the function
    for _ in range(500):
        pars = curves_.sample_pars(rng=rng)
        assert 0 <= pars.plateau <= 1
        assert 1 <= pars.inflection1 <= 366 and 1 <= pars.inflection2 <= 366
        assert pars.rate1 >= 0 and pars.rate2 >= 0
    # immutable once drawn
    with pytest.raises(AttributeError):
        pars.plateau = 0.5
    print('sample_pars ...\t\tmodule curves_.py  runs OK!')


def test_sample_pars_clamping():

# calling the function (with draws far beyond the limits)
    pars = curves_.sample_pars(
        rng=default_rng(1),
        plateau={'mean': 5., 'sd': 0.01, 'limits': (0., 1.)},
        inflection1={'mean': -300, 'sd': 1, 'limits': (1, 366)},
        rate1={'mean': -1., 'sd': 0.01, 'limits': (0., inf)},
        inflection2={'mean': 123, 'sd': 0, 'limits': (1, 366)},
        rate2={'mean': 0.05, 'sd': 0, 'limits': (0., inf)},
        )

    assert pars == (1., 1., 0., 123., 0.05)
    print('sample_pars (clamp) ...\tmodule curves_.py  runs OK!')


def test_sample_pars_seeded():

# calling the function
    one = curves_.sample_pars(rng=default_rng(2024))
    two = curves_.sample_pars(rng=default_rng(2024))

    assert one == two
    print('sample_pars (seed) ...\tmodule curves_.py  runs OK!')


def test_build_curve():

# calling the function
    raw = curves_.build_curve(scene_pars)
    short = curves_.build_curve(scene_pars, max_doy=10)

    assert raw.shape == (366,) and short.shape == (10,)
    assert allclose(raw[:10], short)
    assert allclose(raw[[0, -1]], curves_.dlogistic([1, 366], scene_pars))
    print('build_curve ...\t\tmodule curves_.py  runs OK!')


def test_break_pattern_noop():

    raw = curves_.build_curve(scene_pars)
    test_raw = raw.copy()

# calling the function
    out = curves_.break_pattern(raw, rng=default_rng(42), samples=0)

    assert out is raw and array_equal(raw, test_raw)
    print('break_pattern (no-op) ...\tmodule curves_.py  runs OK!')


def test_break_pattern_sequential():

    # iter.1 -> radius 1 around day 2 ; iter.2 -> radius 2 around day 4
    test_curve = [3., 6.75, 6.75, 6.75, 6.75]

# calling the function
    curve = array([0., 3., 6., 9., 12.])
    curves_.break_pattern(curve, rng=fixed_centres([2, 4]), samples=2, radius=2)

    # a copy-on-write version would have averaged [3, 6, 9, 12] (i.e., 7.5)
    assert allclose(curve, test_curve)
    print('break_pattern (order) ...\tmodule curves_.py  runs OK!')


def test_break_pattern_edges():

# calling the function (windows clipped at both ends of the year)
    curve = arange(1., 11.)
    curves_.break_pattern(curve, rng=fixed_centres([1]), samples=1, radius=3)
    assert allclose(curve[:4], 2.5) and allclose(curve[4:], arange(5., 11.))

    curve = arange(1., 11.)
    curves_.break_pattern(curve, rng=fixed_centres([10]), samples=1, radius=3)
    assert allclose(curve[-4:], 8.5) and allclose(curve[:-4], arange(1., 7.))

    # radius 0 only 'flattens' the centre day
    curve = arange(1., 11.)
    curves_.break_pattern(curve, rng=fixed_centres([5]), samples=1, radius=0)
    assert array_equal(curve, arange(1., 11.))
    print('break_pattern (edges) ...\tmodule curves_.py  runs OK!')


def test_break_pattern_radius():

    # ceil(10 * i / 4) for i in 1..4 (windows far apart, so they don't overlap)
    centres = [20, 100, 200, 300]
    test_radii = [3, 5, 8, 10]

# calling the function (on a ramp, every window flattens to its centre value)
    curve = arange(366.)
    curves_.break_pattern(curve, rng=fixed_centres(centres), samples=4, radius=10)

    for c, r in zip(centres, test_radii):
        assert allclose(curve[c - 1 - r:c + r], c - 1)
        assert curve[c - 2 - r] == c - 2 - r and curve[c + r] == c + r
    assert (curve != arange(366.)).sum() == 2 * sum(test_radii)
    print('break_pattern (radius) ...\tmodule curves_.py  runs OK!')


def test_break_pattern_properties():

    raw = curves_.build_curve(scene_pars)

# calling the function
    one = curves_.break_pattern(raw.copy(), rng=default_rng(7))
    two = curves_.break_pattern(raw.copy(), rng=default_rng(7))

    # reproducible, blockier, bounded & (as averages) mass-preserving
    assert array_equal(one, two)
    assert not array_equal(one, raw)
    assert (diff(one) == 0).sum() > (diff(raw) == 0).sum()
    assert one.min() >= raw.min() - 1e-12 and one.max() <= raw.max() + 1e-12
    assert isclose(one.sum(), raw.sum())
    print('break_pattern (props) ...\tmodule curves_.py  runs OK!')


def test_clamp_curve():

# calling the function (in range -> untouched & quiet)
    curve = array([0.2, 0.15, 0.4])
    with catch_warnings():
        simplefilter('error')
        lims = curves_.clamp_curve(curve)
    assert lims == (0, 0) and allclose(curve, [0.2, 0.15, 0.4])

# calling the function (out of range -> clamped & warned)
    curve = array([-0.1, 0.5, 1.3])
    with pytest.warns(UserWarning, match='clamped'):
        lims = curves_.clamp_curve(curve)
    assert lims == (1, 1) and allclose(curve, [0., 0.5, 1.])

    # the warning threshold is configurable
    with catch_warnings():
        simplefilter('error')
        curves_.clamp_curve(array([-0.1, 0.5, 1.3]), warn_frac=1.)
    print('clamp_curve ...\t\tmodule curves_.py  runs OK!')


def test_monotone_curve():

# calling the function
    one = curves_.monotone_curve(array([0.2, 0.15, 0.4]))
    # forward carry (NOT the average of both neighbours)
    two = curves_.monotone_curve(array([0.5, 0.1, 0.2, 0.6]))

    assert allclose(one, [0.2, 0.2, 0.4])
    assert allclose(two, [0.5, 0.5, 0.5, 0.6])
    print('monotone_curve ...\tmodule curves_.py  runs OK!')


def test_correct_curve():

    rng = default_rng(3)

# calling the function
    with pytest.warns(UserWarning):
        curve = curves_.correct_curve(array([-0.2, 1.4, 0.3]))
    assert allclose(curve, [0., 1., 1.])

    for _ in range(50):
        noisy = rng.normal(0.5, 0.6, size=366)
        curves_.correct_curve(noisy, warn_frac=1.)
        assert (noisy >= 0).all() and (noisy <= 1).all()
        assert (diff(noisy) >= 0).all()
    print('correct_curve ...\tmodule curves_.py  runs OK!')


def test_increments():

# calling the function
    incs = curves_.increments(array([0.2, 0.2, 0.4]))

    assert allclose(incs, [0.2, 0., 0.2]) and isclose(incs.sum(), 0.4)
    print('increments ...\t\tmodule curves_.py  runs OK!')


def test_increments_telescoping():

    raw = curves_.build_curve(scene_pars)
    curve = curves_.correct_curve(curves_.break_pattern(raw, rng=default_rng(5)))

# calling the function
    incs = curves_.increments(curve)

    assert (incs >= 0).all() and isclose(incs.sum(), curve[-1])
    assert curve[-1] <= 1
    print('increments (sum) ...\tmodule curves_.py  runs OK!')


def test_scale_rain():

    incs = array([0.2, 0., 0.2])

# calling the function
    rain = curves_.scale_rain(incs, 500)

    assert allclose(rain, [100., 0., 100.])
    for k in [0., 0.5, 3.]:
        assert allclose(curves_.scale_rain(incs, k * 500), k * rain)
    print('scale_rain ...\t\tmodule curves_.py  runs OK!')


#%% running all tests

if __name__ == '__main__':
    print('\n', end='')
    test_dlogistic()
    test_dlogistic_bounds()
    test_sample_pars()
    test_sample_pars_clamping()
    test_sample_pars_seeded()
    test_build_curve()
    test_break_pattern_noop()
    test_break_pattern_sequential()
    test_break_pattern_edges()
    test_break_pattern_radius()
    test_break_pattern_properties()
    test_clamp_curve()
    test_monotone_curve()
    test_correct_curve()
    test_increments()
    test_increments_telescoping()
    test_scale_rain()
