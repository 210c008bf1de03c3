"""
Types here are instantiated as subclasses of pydantic's `BaseModel`.
This means we get runtime deserialization and validation for free just by using type declarations
and a couple of pydantic helpers.

Use these in your code as python objects, then serialize to json by converting to a dict with `.model_dump()`
"""

from staking_reporter.models.types import *
from staking_reporter.models.Config import *
from staking_reporter.models.Event import *
from staking_reporter.models.Stake import *
from staking_reporter.models.Shares import *
from staking_reporter.models.Reports import *
from staking_reporter.models.Writer import *
from staking_reporter.models.DB import *
