from staking_reporter.rewards.shares import *
from staking_reporter.rewards.distribution import *
from staking_reporter.rewards.merkle import *
