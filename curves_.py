import numpy as np
from collections import namedtuple
from numpy import random as npr
from scipy import stats
from warnings import warn
from parameters import PLATEAU, INFLECTION1, RATE1, INFLECTION2, RATE2
from parameters import MAX_DOY, SAMPLES_PER_YEAR, MAX_RADIUS, CLAMP_WARN


#~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~#
"""
single-year core of DLRAIN [Double-Logistic RAINfall generator].
a year goes through:
    sample_pars -> build_curve -> break_pattern -> clamp_curve ->
    monotone_curve -> increments -> scale_rain
every function works on ONE year (i.e., MAX_DOY days); the buffers are numpy
arrays owned by the caller, and 'break_pattern', 'clamp_curve' and
'monotone_curve' modify them IN PLACE.
"""
#~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~#


# one immutable set of curve parameters per simulated year
curve_pars = namedtuple(
    'curve_pars', ['plateau', 'inflection1', 'rate1', 'inflection2', 'rate2']
    )


# %% double logistic

def dlogistic(doy, pars):
    """
    evaluates the double-logistic curve (cumulative proportion of rain).\n
    Input ->
    *doy* : int or np.array; day(s)-of-year.
    *pars* : curve_pars; plateau, inflections & rates of both sigmoids.\n
    Output -> float or np.array; cumulative proportion of annual rain at doy.
    """
    doy = np.asarray(doy, dtype='f8')
    # large rates overflow the exponential into inf (i.e., the sigmoid is 0)
    with np.errstate(over='ignore'):
        one = pars.plateau / (1 + np.exp((pars.inflection1 - doy) * pars.rate1))
        two = (1 - pars.plateau) / (1 + np.exp((pars.inflection2 - doy) * pars.rate2))
    return one + two


# %% sampling

def normal_draw(spec, rng):
    """
    draws one value from a Normal and clamps it into its limits.\n
    Input ->
    *spec* : dict; with 'mean', 'sd' & 'limits' (tuple) keys.
    *rng* : np.random.Generator; random stream.\n
    Output -> float; clamped sample.
    """
    # a null 'sd' pins the parameter to its mean
    if spec['sd'] == 0:
        value = spec['mean']
    else:
        value = stats.norm(loc=spec['mean'], scale=spec['sd']).rvs(random_state=rng)
    return float(np.clip(value, *spec['limits']))


def sample_pars(**kwargs):
    """
    draws the (randomized) double-logistic parameters of one year.\n
    Input: none.\n
    **kwargs ->
    rng : np.random.Generator; random stream.
    plateau : dict; Normal spec ('mean', 'sd', 'limits') for the plateau.
    inflection1 : dict; Normal spec for the 1st inflection day.
    rate1 : dict; Normal spec for the 1st rate.
    inflection2 : dict; Normal spec for the 2nd inflection day.
    rate2 : dict; Normal spec for the 2nd rate.\n
    Output -> curve_pars; clamped parameters.
    """
    rng = kwargs.get('rng', None) or npr.default_rng()
    specs = [
        kwargs.get('plateau', PLATEAU),
        kwargs.get('inflection1', INFLECTION1),
        kwargs.get('rate1', RATE1),
        kwargs.get('inflection2', INFLECTION2),
        kwargs.get('rate2', RATE2),
        ]
    # the draw order is part of the (seeded) reproducibility
    return curve_pars(*[normal_draw(spec, rng) for spec in specs])


def build_curve(pars, **kwargs):
    """
    evaluates the double-logistic curve for every day of the year.\n
    Input ->
    *pars* : curve_pars; parameters of the year.\n
    **kwargs ->
    max_doy : int; days in the (simulated) year.\n
    Output -> np.array; raw cumulative curve (max_doy long).
    """
    max_doy = kwargs.get('max_doy', MAX_DOY)
    return dlogistic(np.arange(1, max_doy + 1), pars)


# %% pattern breaker

def break_pattern(curve, **kwargs):
    """
    flattens random neighbourhoods of growing size to their mean.\n
    Input ->
    *curve* : np.array; cumulative curve (modified IN PLACE).\n
    **kwargs ->
    rng : np.random.Generator; random stream.
    samples : int; number of neighbourhoods to flatten.
    radius : int; radius (in days) of the last neighbourhood.\n
    Output -> np.array; the very same (now blocky) curve.
    """
    rng = kwargs.get('rng', None) or npr.default_rng()
    samples = kwargs.get('samples', SAMPLES_PER_YEAR)
    radius = kwargs.get('radius', MAX_RADIUS)
    n_doy = curve.size
    for i in range(1, samples + 1):
        # integer ceiling of radius * i / samples
        s_rad = int(-(-radius * i // samples))
        centre = int(rng.integers(1, n_doy, endpoint=True))
        # 0-based slice of the window [centre - s_rad, centre + s_rad]
        left = max(1, centre - s_rad) - 1
        right = min(n_doy, centre + s_rad)
        # every iteration must see the previous one's averages
        curve[left:right] = curve[left:right].mean()
    return curve


# %% corrections

def clamp_curve(curve, **kwargs):
    """
    clamps the curve into [0, 1] (and warns if too many days are clamped).\n
    Input ->
    *curve* : np.array; cumulative curve (modified IN PLACE).\n
    **kwargs ->
    warn_frac : float; fraction of clamped days above which it warns.\n
    Output -> tuple; number of days clamped at 0 (first) & at 1 (last).
    """
    warn_frac = kwargs.get('warn_frac', CLAMP_WARN)
    low = int((curve < 0).sum())
    upp = int((curve > 1).sum())
    np.clip(curve, 0., 1., out=curve)
    if curve.size and (low + upp) / curve.size > warn_frac:
        warn(f'\n{low + upp} out of {curve.size} days were clamped into [0, 1] '
             f'({low} at 0 & {upp} at 1).\nThe double-logistic parameters '
             'are likely poorly calibrated for this record.')
    return low, upp


def monotone_curve(curve):
    """
    repairs decreasing days by carrying the previous maximum forward.\n
    Input ->
    *curve* : np.array; cumulative curve (modified IN PLACE).\n
    Output -> np.array; the very same (now non-decreasing) curve.
    """
    # forward-only: day d takes max(day d, repaired day d-1)
    np.maximum.accumulate(curve, out=curve)
    return curve


def correct_curve(curve, **kwargs):
    """
    clamps the curve into [0, 1] and then makes it non-decreasing.\n
    Input ->
    *curve* : np.array; cumulative curve (modified IN PLACE).\n
    **kwargs ->
    warn_frac : float; fraction of clamped days above which it warns.\n
    Output -> np.array; the very same (now corrected) curve.
    """
    clamp_curve(curve, **kwargs)
    return monotone_curve(curve)


# %% increments

def increments(curve):
    """day-to-day proportions of the annual rain (1st day == its own value)."""
    return np.diff(curve, prepend=0.)


def scale_rain(incs, total):
    """daily rainfall (mm) from daily proportions & the annual total (mm)."""
    return np.asarray(incs, dtype='f8') * total
