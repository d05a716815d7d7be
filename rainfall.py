import numpy as np
import pandas as pd
import xarray as xr
from numpy import random as npr
from scipy import stats
from dask import compute, delayed
from datetime import datetime
from dateutil.tz import tzlocal
from tqdm import tqdm

from parameters import *
from curves_ import sample_pars, build_curve, break_pattern, clamp_curve
from curves_ import monotone_curve, increments, scale_rain


#~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~#
"""
DLRAIN [Double-Logistic RAINfall generator] produces synthetic daily rainfall
for any number of years, from an annual total and the (randomized) shape of the
cumulative proportion of the annual rainfall.

Every simulated year:
    1. draws its own double-logistic parameters;
    2. builds the (smooth) cumulative curve;
    3. breaks its continuous pattern flattening random neighbourhoods;
    4. clamps the curve into [0, 1] & forces it to be non-decreasing;
    5. turns the curve into daily proportions & these into rainfall (mm).
Years share NOTHING but the root seed; each one draws from its own stream.

Note that the curve is NOT renormalized: the rain of a year adds up to
curve[-1] * total, i.e., slightly less than the nominal annual total.
"""
#~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~#


# %% annual totals

def truncated_sampling(distro, **kwargs):
    """
    sampling (truncated or not) preserving the n-requested.\n
    Input ->
    *distro* : scipy.stats frozen pdf.\n
    **kwargs ->
    limits : tuple; variable limits to sample within.
    type_l : char; limits nature (either 'prob' or 'var' -> default).
    n : int; numbers of (random) samples.
    rng : np.random.Generator; random stream.\n
    Output -> np.array of floats with n-samples.
    """
    limits = kwargs.get('limits', (-np.inf, np.inf))
    timit = kwargs.get('type_l', 'var')
    n = kwargs.get('n', 1)
    rng = kwargs.get('rng', None) or npr.default_rng()
    # set up useful range from limits
    if timit == 'var':
        ulims = list(map(distro.cdf, limits))
    elif timit == 'prob':
        ulims = limits
    else:
        raise TypeError("Wrong limits-type passed!\n"
                        "Pass 'var' or 'prob' to the 'type_l' argument.")
    # sample via a uniform.PPF
    return distro.ppf(rng.uniform(low=ulims[0], high=ulims[-1], size=n))


def annual_total(simy, **kwargs):
    """
    nominal annual rainfall for a simulated year.\n
    Input ->
    *simy* : int; index (0-based) of the simulated year.\n
    **kwargs ->
    rng : np.random.Generator; random stream.
    ptot : float; (mean) annual rainfall in mm.
    ptot_sd : float; standard deviation of the annual rainfall (None -> fixed).
    ptot_sc : float; step change factor of the annual rainfall.
    ptot_sf : float; progressive trend factor of the annual rainfall.
    no_rain : float; minimum annual rainfall when sampling.\n
    Output -> float; annual rainfall (mm) for the year.
    """
    ptot = kwargs.get('ptot', PTOT)
    ptot_sd = kwargs.get('ptot_sd', PTOT_SD)
    ptot_sc = kwargs.get('ptot_sc', PTOT_SC[0])
    ptot_sf = kwargs.get('ptot_sf', PTOT_SF[0])
    if ptot_sd:
        total = truncated_sampling(
            stats.norm(loc=ptot, scale=ptot_sd), n=1, rng=kwargs.get('rng', None),
            limits=(kwargs.get('no_rain', NO_RAIN), np.inf),
            )[0]
    else:
        total = ptot
    # using 'simy' (0-based) leaves the 1st year untouched by the trend
    return float(total * (1 + ptot_sc + simy * ptot_sf))


# %% one year

class year_rain:

    def __init__(self, simy, **kwargs):
        """
        runs the whole chain (parameters to rainfall) for ONE year.\n
        Input ->
        *simy* : int; index (0-based) of the simulated year.\n
        **kwargs ->
        rng : np.random.Generator; random stream (of this year only).
        any other keyword of 'sample_pars', 'annual_total', 'build_curve',
        'break_pattern' or 'clamp_curve'.\n
        Output -> a class with the stages of the year, i.e.:
        .pars (curve_pars), .total (float), .raw, .broken, .curve, .incs
        and .rain (np.arrays) and .clamped (tuple).
        """
        rng = kwargs.pop('rng', None) or npr.default_rng()
        self.simy = simy
        self.pars = sample_pars(rng=rng, **kwargs)
        self.total = annual_total(simy, rng=rng, **kwargs)
        self.raw = build_curve(self.pars, **kwargs)
        # each stage keeps its own buffer so they can be compared afterwards
        self.broken = break_pattern(self.raw.copy(), rng=rng, **kwargs)
        self.curve = self.broken.copy()
        self.clamped = clamp_curve(self.curve, **kwargs)
        monotone_curve(self.curve)
        self.incs = increments(self.curve)
        self.rain = scale_rain(self.incs, self.total)

    def __repr__(self):
        return (f'year_rain(simy={self.simy}, total={self.total:.2f}, '
                f'realized={self.rain.sum():.2f})')


# %% many years

def streams(seed, n):
    """
    spawns n independent seeds out of a root one.\n
    Input ->
    *seed* : int, None or np.random.SeedSequence; root seed.
    *n* : int; number of child streams.\n
    Output -> list of np.random.SeedSequence.
    """
    root = seed if isinstance(seed, npr.SeedSequence) else npr.SeedSequence(seed)
    return root.spawn(n)


def simulate(**kwargs):
    """
    simulates (independently) the years of ONE run.\n
    Input: none.\n
    **kwargs ->
    n_years : int; number of years to simulate.
    seed : int, None or np.random.SeedSequence; root seed of the run.
    seed_year : int; calendar label of the 1st year (None -> current year).
    parallel : bool; compute the years in (dask) threads?.
    progress : bool; show a progress bar?.
    any other keyword of 'year_rain'.\n
    Output -> xr.Dataset; (year, doy) stages & (year,) parameters of the run.
    """
    n_years = kwargs.pop('n_years', NUMSIMYRS)
    seed = kwargs.pop('seed', SEED)
    year_z = kwargs.pop('seed_year', SEED_YEAR) or datetime.now().year
    parallel = kwargs.pop('parallel', False)
    progress = kwargs.pop('progress', True)

    seeds = streams(seed, n_years)
    if parallel:
        # one stream per task: threads never share a Generator
        tasks = [delayed(year_rain)(simy, rng=npr.default_rng(s), **kwargs)
                 for simy, s in enumerate(seeds)]
        years = list(compute(*tasks, scheduler='threads'))
    else:
        years = [year_rain(simy, rng=npr.default_rng(s), **kwargs)
                 for simy, s in enumerate(tqdm(seeds, ncols=50, disable=not progress))]

    return stack_years(years, year_z, **kwargs)


def stack_years(years, year_z, **kwargs):
    """
    assembles single years into one dataset (sorted by year index).\n
    Input ->
    *years* : list; year_rain instances.
    *year_z* : int; calendar label of the 1st year.\n
    **kwargs ->
    max_doy : int; days in the (simulated) year.
    rain_name : char; name of the rainfall variable.\n
    Output -> xr.Dataset; (year, doy) stages & (year,) parameters of the run.
    """
    max_doy = kwargs.get('max_doy', MAX_DOY)
    rain_name = kwargs.get('rain_name', RAIN_NAME)
    years = sorted(years, key=lambda y: y.simy)
    simy = np.array([y.simy for y in years], dtype='i4')

    def by_day(tag):
        return (['year', 'doy'], np.array(
            [getattr(y, tag) for y in years], dtype='f8').reshape(-1, max_doy))

    def by_year(values, dtype='f8'):
        return (['year'], np.array(values, dtype=dtype))

    xset = xr.Dataset(
        data_vars={
            'raw': by_day('raw'),
            'broken': by_day('broken'),
            'curve': by_day('curve'),
            'incs': by_day('incs'),
            rain_name: by_day('rain'),
            'total': by_year([y.total for y in years]),
            'clamp_low': by_year([y.clamped[0] for y in years], 'i4'),
            'clamp_upp': by_year([y.clamped[-1] for y in years], 'i4'),
            },
        coords={
            'year': (['year'], year_z + simy),
            'doy': (['doy'], np.arange(1, max_doy + 1, dtype='i4')),
            'simy': (['year'], simy + 1),
            },
        attrs={
            'title': 'DLRAIN synthetic daily rainfall',
            'created_on': datetime.now(tzlocal()).strftime('%Y-%m-%d %H:%M:%S %Z'),
            },
        )
    for field in ['plateau', 'inflection1', 'rate1', 'inflection2', 'rate2']:
        xset[field] = by_year([getattr(y.pars, field) for y in years])

    xset['raw'].attrs = {'long_name': 'cumulative proportion (double-logistic)'}
    xset['broken'].attrs = {'long_name': 'cumulative proportion (pattern broken)'}
    xset['curve'].attrs = {'long_name': 'cumulative proportion (corrected)'}
    xset['incs'].attrs = {'long_name': 'daily proportion of the annual total'}
    xset[rain_name].attrs = {'long_name': 'daily rainfall', 'units': 'mm'}
    xset['total'].attrs = {'long_name': 'nominal annual rainfall', 'units': 'mm'}
    return xset


def to_frame(xset, **kwargs):
    """
    flattens the rainfall of a run into a (simy, year, doy, rain) table.\n
    Input ->
    *xset* : xr.Dataset; output of 'simulate'.\n
    **kwargs ->
    rain_name : char; name of the rainfall variable.\n
    Output -> pd.DataFrame; one row per simulated day (sorted by year & doy).
    """
    rain_name = kwargs.get('rain_name', RAIN_NAME)
    frame = xset[rain_name].to_dataframe().reset_index()
    return frame[['simy', 'year', 'doy', rain_name]]


# %% export

def xport(xset, nc_file, **kwargs):
    """
    stores a run as nc-file (all stages) & as csv-file (daily rainfall).\n
    Input ->
    *xset* : xr.Dataset; output of 'simulate'.
    *nc_file* : char; output path of the nc-file.\n
    **kwargs ->
    rain_name : char; name of the rainfall variable.
    rainfmt : char; storage format of the rainfall variable.\n
    Output -> tuple; paths of the nc-file (first) & the csv-file (last).
    """
    rain_name = kwargs.get('rain_name', RAIN_NAME)
    rainfmt = kwargs.get('rainfmt', RAINFMT)
    encoding = {x: {'zlib': True, 'complevel': 9} for x in
                ['raw', 'broken', 'curve', 'incs', rain_name]}
    encoding[rain_name]['dtype'] = rainfmt
    xset.to_netcdf(nc_file, mode='w', engine='netcdf4', encoding=encoding)
    csv_file = nc_file.replace('.nc', '.csv')
    to_frame(xset, rain_name=rain_name).to_csv(csv_file, sep=',', index=False)
    return nc_file, csv_file


# %% wrapper

def wrapper(NC_NAMES, **kwargs):
    """
    runs (and stores) every simulation.\n
    Input ->
    *NC_NAMES* : list; simulation output-paths (one per run).\n
    **kwargs ->
    seed : int or None; root seed of ALL runs.
    ptot_sc : list; step change factors (one per run).
    ptot_sf : list; progressive trend factors (one per run).
    any other keyword of 'simulate'.\n
    Output -> list of xr.Dataset; one per run.
    """
    seed = kwargs.pop('seed', SEED)
    ptot_sc = kwargs.pop('ptot_sc', PTOT_SC)
    ptot_sf = kwargs.pop('ptot_sf', PTOT_SF)

    xsets = []
    # FOR EVERY FILE/SIMULATION
    for nsim, (sim_file, sim_seed) in enumerate(
            zip(NC_NAMES, streams(seed, len(NC_NAMES)))):

        print(f'\tRUN: {"{:02d}".format(nsim + 1)}/{"{:02d}".format(len(NC_NAMES))}')
        print('progress')
        print('********')

        xset = simulate(seed=sim_seed, ptot_sc=ptot_sc[nsim],
                        ptot_sf=ptot_sf[nsim], **kwargs)
        xport(xset, sim_file, **kwargs)
        xsets.append(xset)

        # realized vs nominal totals (the curve is never renormalized)
        print(pd.DataFrame({
            'nominal': xset.total.data.round(2),
            'realized': xset[kwargs.get('rain_name', RAIN_NAME)].sum('doy').data.round(2),
            }).describe().loc[['mean', 'min', 'max']].round(2), end='\n\n')
    return xsets


# %% run

if __name__ == '__main__':

    from checks_ import welcome
    willkommen = welcome()
    NC_NAMES = willkommen.ncs
    wrapper(NC_NAMES, ptot_sc=willkommen.ptot_sc, ptot_sf=willkommen.ptot_sf)
