#%% SOFT-CORE PARAMETERS

"""
Parameters in this block define the size of the RUN and the annual rainfall
DLRAIN has to distribute along the (simulated) years.
The parameters set up here will be the default input of DLRAIN.
You can either modify/tweak them here (thus avoiding passing them again when
running DLRAIN from the command line) or passing/defining them right from the
command line when running DLRAIN.
For an 'in-prompt' help (on these parameters) type:
    "python dlrain.py -h"    (from your CONDA environment or Terminal)
    "%%python dlrain.py -h"  (from your Python console)
"""

NUMSIMS   =  1          # Number of runs (one output file per run)
NUMSIMYRS = 33          # Number of years per run

PTOT    = 500.          # in mm -> (nominal) annual rainfall
PTOT_SD = None          # in mm -> None for a FIXED annual total
"""
PTOT_SD != None re-samples the annual total, every simulated year, from a
Normal(PTOT, PTOT_SD) truncated below NO_RAIN.
PTOT can be taken (for instance) as the mean of the historical annual sums of
your station; deriving it is up to you (DLRAIN doesn't read weather files).
"""

"""
PTOT_SC = Signed scalar specifying the step change in the annual rainfall
PTOT_SF = Signed scalar specifying the progressive trend in the annual rainfall
*** one scalar per run; both set to 0 implies stationary conditions ***
*** either PTOT_SC or PTOT_SF (or both) must be 0 for any given run ***
"""

# # PARAMETER = [ S1 ]
PTOT_SC = [0.00]
PTOT_SF = [0.00]

SEED = None             # root seed for ALL random streams (None -> OS entropy)


#%% HARD-CORE PARAMETERS

"""
Parameters in this block define the shape of the double-logistic curve, the
'pattern breaker' and the output of DLRAIN.
Unlike the parameters set up in the previous block, most of these parameters
cannot be passed from the command line. Therefore, their modification/tweaking
must carried out here.
"""

### DAY-OF-YEAR characterization
MAX_DOY = 366           # days in every simulated year (leap or not!)
NO_RAIN = 0.01          # in mm -> minimum sampled annual rainfall

### DOUBLE-LOGISTIC characterization
"""
f(d) = plateau / (1 + exp((inflection1 - d) * rate1))
     + (1 - plateau) / (1 + exp((inflection2 - d) * rate2))
Every year draws its own parameters from Normal(mean, sd), clamped into
'limits'. These values were calibrated against one station; re-calibrate
them (i.e., against the cumulative annual proportions of your own record)
before modelling somewhere else.
"""
PLATEAU     = {'mean': 0.10, 'sd': 0.05, 'limits': (0., 1.)}
INFLECTION1 = {'mean':   40, 'sd':   20, 'limits': (1, MAX_DOY)}
RATE1       = {'mean': 0.15, 'sd': 0.02, 'limits': (0., float('inf'))}
INFLECTION2 = {'mean':  200, 'sd':   20, 'limits': (1, MAX_DOY)}
RATE2       = {'mean': 0.05, 'sd': 0.01, 'limits': (0., float('inf'))}

### PATTERN-BREAKER characterization
SAMPLES_PER_YEAR = 200  # number of neighbourhoods flattened per year
MAX_RADIUS       =  10  # in days -> radius of the last (widest) neighbourhood
"""
The radius grows linearly from ~0 to MAX_RADIUS along the SAMPLES_PER_YEAR
iterations; i.e., early iterations are fine adjustments & late ones broad.
"""

# fraction of days (per year) that can be clamped into [0, 1] before warning
CLAMP_WARN = 0.05

### OUTPUT characterization
OUT_PATH  = './model_output'            # output folder
SEED_YEAR = None                        # for your SIM to start in the current year
# SEED_YEAR = 2024                        # for your SIM to start in 2024
RAIN_NAME = 'rain'                      # name of the rainfall variable
RAINFMT   = 'f4'                        # storage format of the rainfall variable
