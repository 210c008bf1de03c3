from staking_reporter.queries.common import *
from staking_reporter.queries.stake_events import *
from staking_reporter.queries.covalent import *
from staking_reporter.queries.files import *
