from staking_reporter.staking.ledger import *
from staking_reporter.staking.periods import *
from staking_reporter.staking.eligibility import *
