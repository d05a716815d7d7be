"""
To run this script type:
    "python dlrain.py"    (from your CONDA environment or Terminal)
    "%%python dlrain.py"  (from your Python console)
"""


# %% functions

def read(argv=None):
    """
    parse and assertion of some input parameters.\n
    Parameters
    ----------
    argv : list; arguments to parse (None -> sys.argv).\n
    Returns
    -------
    dict : updated parameters (as keywords).
    """
    from argparse import ArgumentParser
    from checks_ import parse, to_kwargs
    parser = ArgumentParser(
        description='Double-Logistic RAINfall generator [DLRAIN v1.0]'
        )
    # call class & run the parsing
    arg_upd = parse(parser).parsing(argv)
    return to_kwargs(arg_upd)


def test(arg_upd):
    """
    assertion of the input parameters & naming of the output files.\n
    Parameters
    ----------
    arg_upd : dict; with parameters to update.\n
    Returns
    -------
    checks_.welcome : output-paths (.ncs) & replicated scalars.
    """
    from checks_ import welcome, assertion
    assertion(**arg_upd)
    willkommen = welcome(**arg_upd)
    return willkommen


def compute_rain(one, two):
    """
    calls scripts in 'rainfall.py' so the daily RAIN can be computed.\n
    Parameters
    ----------
    one : dict; parameters read from the command prompt.
    two : checks_.welcome; simulation output-paths & replicated scalars.\n
    Returns
    -------
    list : one xarray.Dataset per simulation (also stored as nc/csv-files).
    """
    # import here these heavy modules so there's little toll when calling for
    # ... --help or --version in 'ArgumentParser'.
    from rainfall import wrapper
    one = {**one, 'ptot_sc': two.ptot_sc, 'ptot_sf': two.ptot_sf}
    return wrapper(two.ncs, **one)


def main(argv=None):
    """reads, checks & runs DLRAIN (i.e., what 'python dlrain.py' does)."""
    up_args = read(argv)
    nc_name = test(up_args)
    return compute_rain(up_args, nc_name)


# %% run

if __name__ == '__main__':

    main()
