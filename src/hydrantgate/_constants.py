"""Internal constants shared across the library."""

#: Mean Earth radius used by the haversine formula, in kilometres.
EARTH_RADIUS_KM = 6371.0

#: Approximate length of one degree of latitude, in kilometres.
KM_PER_DEGREE = 111.0

DEFAULT_SOURCE_PATH = "hydrants.csv"
DEFAULT_BOUNDS_LIMIT = 500
DEFAULT_RADIUS_KM = 2.0
DEFAULT_PROXIMITY_THRESHOLD_M = 50.0

# A fix this close to the target (on both axes) was defaulted to the
# target rather than measured.
DEFAULTED_FIX_EPSILON_DEG = 1e-4

# A candidate fix older than this is stale and re-acquired.
DEFAULT_MAX_FIX_AGE_S = 60.0

LATITUDE_COLUMN = "latitude"
LONGITUDE_COLUMN = "longitude"
