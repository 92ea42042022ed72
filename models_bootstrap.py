# models_bootstrap.py
from station import models as _station_models
from worker import models as _worker_models
from shift import models as _shift_models
from shiftexception import models as _shiftexception_models
from signup import models as _signup_models
