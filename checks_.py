import numpy as np
from pandas import DataFrame
from pathlib import Path
from datetime import datetime
from argparse import ArgumentParser
from warnings import warn
from parameters import NUMSIMS, NUMSIMYRS, PTOT, PTOT_SD, PTOT_SC, PTOT_SF
from parameters import PLATEAU, INFLECTION1, RATE1, INFLECTION2, RATE2
from parameters import MAX_DOY, SAMPLES_PER_YEAR, MAX_RADIUS, CLAMP_WARN
from parameters import OUT_PATH, SEED
from dateutil.tz import tzlocal
# https://stackoverflow.com/a/248066/5885810
from os.path import abspath, dirname, join
parent_d = dirname(__file__)  # otherwise, will append the path.of.the.tests


# command-line names -> keyword names (used all along DLRAIN)
ARG_KEYS = {
    'NUMSIMS': 'n_sims',
    'NUMSIMYRS': 'n_years',
    'PTOT': 'ptot',
    'PTOT_SD': 'ptot_sd',
    'PTOT_SC': 'ptot_sc',
    'PTOT_SF': 'ptot_sf',
    'SAMPLES_PER_YEAR': 'samples',
    'MAX_RADIUS': 'radius',
    'SEED': 'seed',
    'PARALLEL': 'parallel',
    }


def to_kwargs(arguments):
    """
    renames the parsed arguments into the keywords DLRAIN works with.\n
    Input ->
    *arguments* : argparse.Namespace; parsed parameters.\n
    Output -> dict; keyword arguments.
    """
    return {ARG_KEYS[x]: v for x, v in vars(arguments).items() if x in ARG_KEYS}


# %% parsing

class parse:

    def __init__(self, parser, **kwargs):
        """
        preliminars before running DLRAIN.\n
        Parameters
        ----------
        parser : argparse.ArgumentParser;
            parameters passed/captured from the command line.\n
        **kwargs
        --------
        n_sims : int; indicates the number of simulations/files to output.
        n_years : int; indicates the number of years (per simulation) to run.
        ptot : float; (mean) annual rainfall.
        ptot_sd : float; standard deviation of the annual rainfall.
        ptot_sc : list; Step Change factors in annual rainfall.
        ptot_sf : list; Progressive Trend factors in annual rainfall.
        samples : int; neighbourhoods to flatten per year.
        radius : int; radius of the widest neighbourhood.
        seed : int; root seed.\n
        Returns
        -------
        argparse.Namespace; updated global parameters.
        """
        self.input = parser
        self._version = 'DLRAIN v.1.0'
        # assign the global/default parameters (to inner variables)
        self.numsims = kwargs.get('n_sims', NUMSIMS)
        self.numsimyrs = kwargs.get('n_years', NUMSIMYRS)
        self.ptot = kwargs.get('ptot', PTOT)
        self.ptot_sd = kwargs.get('ptot_sd', PTOT_SD)
        self.ptot_sc = kwargs.get('ptot_sc', PTOT_SC)
        self.ptot_sf = kwargs.get('ptot_sf', PTOT_SF)
        self.samples = kwargs.get('samples', SAMPLES_PER_YEAR)
        self.radius = kwargs.get('radius', MAX_RADIUS)
        self.seed = kwargs.get('seed', SEED)

    def none_too(self, v):
        """
        assimilates NONE inputs from the command line.\n
        Parameters
        ----------
        v : char;
            none string.\n
        Returns
        -------
        updated input to NoneType or float.
        """
        # https://stackoverflow.com/a/48295546/5885810  (None in argparse)
        return None if v.lower() == 'none' else float(v)

    def none_int(self, v):
        """same as 'none_too' but for integers."""
        return None if v.lower() == 'none' else int(v)

    # https://docs.python.org/3/library/argparse.html#the-add-argument-method
    def parsing(self, argv=None):
        """
        reads parameters from the command line.\n
        Parameters
        ----------
        argv : list; arguments to parse (None -> sys.argv).\n
        Returns
        -------
        argparse.Namespace; updated global parameters.
        """
        # add the defaults
        self.input.add_argument(
            '-n', '--NUMSIMS', type=int, default=self.numsims,
            help='Number of simulations (default: %(default)s)'
            )
        self.input.add_argument(
            '-y', '--NUMSIMYRS', type=int, default=self.numsimyrs,
            help='Number of years per Simulation (default: %(default)s)'
            )
        self.input.add_argument(
            '-p', '--PTOT', type=float, default=self.ptot,
            help='(Mean) annual rainfall in mm (default: %(default)s)'
            )
        self.input.add_argument(
            '-pd', '--PTOT_SD', type=self.none_too, default=self.ptot_sd,
            help='Standard deviation of the annual rainfall in mm; "none" '
            'keeps the annual rainfall fixed (default: %(default)s)'
            )
        self.input.add_argument(
            '-ps', '--PTOT_SC', default=self.ptot_sc, type=float, nargs='+',
            help='Relative change in the annual rain equally applied to '
            'every simulated year. (one signed scalar per Simulation).'
            )
        self.input.add_argument(
            '-pf', '--PTOT_SF', default=self.ptot_sf, type=float, nargs='+',
            help='Relative change in the annual rain progressively applied '
            'to every simulated year. (one signed scalar per Simulation).'
            )
        self.input.add_argument(
            '-k', '--SAMPLES_PER_YEAR', type=int, default=self.samples,
            help='Neighbourhoods flattened per year (default: %(default)s)'
            )
        self.input.add_argument(
            '-r', '--MAX_RADIUS', type=int, default=self.radius,
            help='Radius (in days) of the widest neighbourhood '
            '(default: %(default)s)'
            )
        self.input.add_argument(
            '-s', '--SEED', type=self.none_int, default=self.seed,
            help='Root seed of the random streams (default: %(default)s)'
            )
        self.input.add_argument(
            '--PARALLEL', action='store_true',
            help='Simulate the years in parallel (threads)'
            )
        self.input.add_argument(
            '--version', action='version', version=self._version
            )
        # Read arguments from command line
        return self.input.parse_args(argv)


# %% file-naming

class welcome:

    def __init__(self, **kwargs):
        """
        generates and prints the names of the output nc-files.\n
        Input: none.\n
        **kwargs ->
        ptot : float; (mean) annual rainfall.
        ptot_sd : float; standard deviation of the annual rainfall.
        ptot_sc : list; Step Change factors in annual rainfall.
        ptot_sf : list; Progressive Trend factors in annual rainfall.
        n_sims : int; indicates the number of simulations/files to output.
        n_years : int; indicates the number of years (per simulation) to run.
        out_path : char; where to store the simulations.\n
        Output -> list; containing output file-paths/names.
        """
        # assign the global/default parameters (to inner variables)
        self.numsims = kwargs.get('n_sims', NUMSIMS)
        self.numsimyrs = kwargs.get('n_years', NUMSIMYRS)
        self.ptot = kwargs.get('ptot', PTOT)
        self.ptot_sd = kwargs.get('ptot_sd', PTOT_SD)
        self.ptot_sc = list(kwargs.get('ptot_sc', PTOT_SC))
        self.ptot_sf = list(kwargs.get('ptot_sf', PTOT_SF))
        self.out_path = kwargs.get('out_path', OUT_PATH)
        # signs (Var1) related to scalars (Var2)
        self.tab_sign = DataFrame({
            'Var1': ['', '+', '-'],
            'Var2': [0, 1, -1],
            })
        # table to correlate signs & scenarios
        self.tab_ptot = DataFrame({
            'Var1': ['ptotC', 'ptotS', 'ptotT', 'n/a'],
            'Var2': [0, 1, 2, 3],
            })
        """
      'ptotC' = Stationary conditions / Control Climate
      'ptotS' = Step Change (increase/decrese) in annual rainfall
      'ptotT' = Progressive Trend (positive/negative) in annual rainfall
        'n/a' = scenario NOT DEFINED (as both PTOT_SC & PTOT_SF differ from 0)
        """
        self.replicate()
        self.ncs = self.output_path()

    def replicate(self,):
        """
        replicates scalars for NUMSIMS (if fewer were passed).\n
        Input: none.\n
        Output -> none; updated instances of scaling parameters.
        """
        if min(len(self.ptot_sc), len(self.ptot_sf)) < self.numsims:
            warn(f'\nIncompatible Sizes in PTOT_SC/PTOT_SF and '
                 f'NUMSIMS == {self.numsims}.\nDLRAIN will only use the values '
                 'of the first Simulation, so they can be passed to all '
                 f'{self.numsims} Simulations.')
            self.ptot_sc = [self.ptot_sc[0]] * self.numsims
            self.ptot_sf = [self.ptot_sf[0]] * self.numsims

    def output_path(self,):
        """
        generates the names of the output nc-files.\n
        Input: none.\n
        Output -> list; containing output file-paths/names.
        """
        # infer scenarios
        ptot_scene = self.infer_scenario(
            self.ptot_sc[:self.numsims], self.ptot_sf[:self.numsims],
            self.tab_ptot, self.tab_sign
            )

        # create OUT_PATH folder (if it doen'st exist already)
        # https://stackoverflow.com/a/50110841/5885810  (create folder if exisn't)
        abs_path = abspath(join(parent_d, self.out_path))
        Path(abs_path).mkdir(parents=True, exist_ok=True)
        # define NC.output file.names
        stamp = datetime.now(tzlocal()).strftime("%y%m%dT%H%M")
        nc_paths = list(map(
            lambda a, b: f'{Path(abs_path)}/{stamp}_sim{"{:02d}".format(a+1)}_'
            f'{b.strip().replace("/", "")}.nc', range(self.numsims), ptot_scene))

        # print the CORE INFO
        print('\nRUN SETTINGS')
        print('************\n')
        print(f'number of simulations: {self.numsims}')
        print(f'years per simulation : {self.numsimyrs}')
        print(f'annual rainfall [mm] : {self.ptot}'
              f'{"" if not self.ptot_sd else f" +/- {self.ptot_sd}"}')
        # 8 because 'ptotT+' fits (with room) in these strings
        print(f'Total Rainfall scenarios '
              f'({" | ".join([f"sim{x+1}" for x in range(self.numsims)])}):  '
              f'{" | ".join([x.center(8, " ") for x in ptot_scene])}')
        print('\nOutput paths:')
        print(*[(k.ljust(max(map(len, nc_paths)), ' ')).rjust(
            max(map(len, nc_paths)) + 4, ' ') for k in nc_paths], sep='\n',)
        print('')
        return nc_paths

    def infer_scenario(self, stepchange, scaling_factor, tab_x, tab_sign):
        """
        transforms the numerical input of sc/sf factors into 'readable' labels.\n
        Input ->
        *stepchange* : list; list of floats with step_change factors/coeffs.
        *scaling_factor* : list; list of floats with scaling factors/coeffs.
        *tab_x* : pandas.DataFrame; scenario-codes (Var1) related to scalars (Var2).
        *tab_sign* : pandas.DataFrame; sign-codes (Var1) related to signs (Var2).\n
        Output -> list; input-size list with the scenario-tags to append to file-name.
        """
        # convert input into numpy
        stepchange = np.nan_to_num(np.asarray(stepchange, dtype='f8'))
        scaling_factor = np.nan_to_num(np.asarray(scaling_factor, dtype='f8'))
        # establish whether is a 0, 1, 2, or 3
        sum_vec = (stepchange != 0).astype('i4') + 2 * (scaling_factor != 0)
        # compute signs
        sign_ar = np.sign(np.sign(stepchange) + np.sign(scaling_factor))
        # find the variables and their signs in the corresponding 'tables'
        sign_tag = tab_sign.set_index('Var2').loc[sign_ar.astype('i4'), 'Var1']
        str_vec = list(map(
            lambda A, B: f"{A}{B}", tab_x.set_index('Var2').loc[sum_vec, 'Var1'].values,
            sign_tag.values
            ))
        return str_vec


# %% assert

def assertion(**kwargs):
    """
    performs some assertions to test the validity of input parameters.\n
    Input: none.\n
    **kwargs ->
    any of the keywords of 'parse', plus:
    max_doy : int; days in the (simulated) year.
    warn_frac : float; fraction of clamped days above which DLRAIN warns.
    plateau, inflection1, rate1, inflection2, rate2 : dict; Normal specs.\n
    Output -> none; assertions.
    """
    numsims = kwargs.get('n_sims', NUMSIMS)
    numsimyrs = kwargs.get('n_years', NUMSIMYRS)
    ptot = kwargs.get('ptot', PTOT)
    ptot_sd = kwargs.get('ptot_sd', PTOT_SD)
    ptot_sc = list(kwargs.get('ptot_sc', PTOT_SC))
    ptot_sf = list(kwargs.get('ptot_sf', PTOT_SF))
    samples = kwargs.get('samples', SAMPLES_PER_YEAR)
    radius = kwargs.get('radius', MAX_RADIUS)
    max_doy = kwargs.get('max_doy', MAX_DOY)
    warn_frac = kwargs.get('warn_frac', CLAMP_WARN)

    # counters must be (non-negative) integers
    for name, value, least in [
            ('NUMSIMS', numsims, 1), ('NUMSIMYRS', numsimyrs, 0),
            ('SAMPLES_PER_YEAR', samples, 0), ('MAX_RADIUS', radius, 0),
            ('MAX_DOY', max_doy, 1)]:
        assert isinstance(value, (int, np.integer)) and value >= least,\
            f'{name} not valid!\nPlease, ensure that {name} is an integer '\
            f'equal or larger than {least} (now it is {value}).'

    # the Normal specs of the double-logistic parameters
    for name, default in [
            ('plateau', PLATEAU), ('inflection1', INFLECTION1), ('rate1', RATE1),
            ('inflection2', INFLECTION2), ('rate2', RATE2)]:
        spec = kwargs.get(name, default)
        assert {'mean', 'sd', 'limits'}.issubset(spec),\
            f'{name.upper()} not valid!\nPlease, define its "mean", "sd" '\
            'and "limits" (i.e., a dictionary with those three keys).'
        assert spec['sd'] >= 0, f'{name.upper()} not valid!\nPlease, ensure '\
            'a non-negative standard deviation ("sd").'
        assert spec['limits'][0] <= spec['limits'][-1],\
            f'{name.upper()} not valid!\nPlease, ensure that its "limits" '\
            'are sorted, i.e., (lower, upper).'

    # the annual rainfall
    assert ptot >= 0, 'PTOT not valid!\nThe annual rainfall cannot be negative.'
    assert ptot_sd is None or ptot_sd >= 0, 'PTOT_SD not valid!\n'\
        'Please, pass a non-negative standard deviation (or None).'
    assert 0 <= warn_frac <= 1, 'CLAMP_WARN not valid!\nPlease, ensure '\
        'a fraction (of days) between 0 and 1.'

    # does each dimension/simulation have the same length among them??
    if len(ptot_sc) != len(ptot_sf):
        warn('\nIncompatible Sizes in PTOT_SC and PTOT_SF!\nDLRAIN will '
             'only use the values of the first Simulation, so they '
             f'can be passed to all {numsims} Simulations.')
    for i in range(min(len(ptot_sc), len(ptot_sf))):
        # is the scalar factor (SC) below 0 rain?
        assert 1 + ptot_sc[i] >= 0, 'Scalar Overflooding!\n'\
            f'Please, ensure that step change scalar PTOT_SC in simulation {i + 1} '\
            'does not produce negative rainfall.'
        # does the progression factor (SF) reduces below 0 rain?
        assert 1 + ptot_sf[i] * max(numsimyrs - 1, 0) >= 0,\
            'Scalar Overflooding!\nPlease, ensure that over the '\
            f'{numsimyrs}-years, the trend scalar PTOT_SF in simulation '\
            f'{i + 1} does not produce negative rainfall.'
        # both scalars at once is an undefined ('n/a') scenario
        assert not (ptot_sc[i] != 0 and ptot_sf[i] != 0),\
            'PTOT_SCENARIO not valid!\nPlease, ensure that either PTOT_SC or '\
            'PTOT_SF (or both!) are set to 0 (zero), for simulation '\
            f'{i + 1} of the run.'


# %% run

if __name__ == '__main__':

    parser = ArgumentParser(description='Double-Logistic RAINfall generator [DLRAIN v1.0]')
    # call class & run the parsing
    upd_args = to_kwargs(parse(parser).parsing())
    assertion(**upd_args)
    willkommen = welcome(**upd_args)
