"""
test for the whole chain in ../DLRAIN/dlrain.py
"""

# append DLRAIN to sys
from os.path import dirname, exists
from sys import path
# https://stackoverflow.com/a/248066/5885810
curent_d = dirname(__file__)
path.insert(0, dirname( curent_d ))

# import local libs
from numpy import allclose
from pandas import read_csv
from tempfile import mkdtemp
import pytest

# now import the module
import dlrain


# unitestS start here!
# --------------------
def test_read():

# calling the function
    up_args = dlrain.read(['-n', '2', '-y', '3', '-s', '42', '-ps', '0', '0.2'])

    assert up_args['n_sims'] == 2 and up_args['n_years'] == 3
    assert up_args['seed'] == 42 and up_args['ptot_sc'] == [0., 0.2]
    print('read ...\t\tmodule dlrain.py  runs OK!')


def test_test(tmp_path):

# calling the function
    with pytest.raises(AssertionError):
        dlrain.test({'n_sims': 1, 'ptot': -1., 'out_path': str(tmp_path)})
    nc_name = dlrain.test({'n_sims': 1, 'out_path': str(tmp_path)})

    assert len(nc_name.ncs) == 1 and nc_name.ncs[0].endswith('_sim01_ptotC.nc')
    print('test ...\t\tmodule dlrain.py  runs OK!')


def test_compute_rain(tmp_path):

    up_args = dlrain.read(['-n', '2', '-y', '3', '-s', '42', '-ps', '0', '0.2',
                           '-pf', '0', '0', '-k', '20', '-r', '5'])
    nc_name = dlrain.test({**up_args, 'out_path': str(tmp_path)})

# calling the function
    xsets = dlrain.compute_rain(up_args, nc_name)

    assert len(xsets) == 2 and all(map(exists, nc_name.ncs))
    assert allclose(xsets[0].total, 500.) and allclose(xsets[-1].total, 600.)
    test_csv = read_csv(nc_name.ncs[-1].replace('.nc', '.csv'))
    assert len(test_csv) == 3 * 366
    assert allclose(test_csv.groupby('year').rain.sum(),
                    xsets[-1].rain.sum('doy'), atol=1e-3)
    print('compute_rain ...\tmodule dlrain.py  runs OK!')


#%% running all tests

if __name__ == '__main__':
    print('\n', end='')
    test_read()
    test_test(mkdtemp())
    test_compute_rain(mkdtemp())
