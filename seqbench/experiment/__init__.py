"""
Experiment lifecycle, capability negotiation and results collection.
"""

from .capabilities import (
    Capabilities,
    Checkpointable,
    Loggable,
    MemoryContractable,
    Randomizable,
    TestTimeContractable,
    TrainEstimateable,
    TrainTimeContractable,
)
from .experiment import Experiment, ExperimentState
from .results import ExperimentResults, PredictionRecord

__all__ = [
    'Capabilities',
    'Checkpointable',
    'Loggable',
    'MemoryContractable',
    'Randomizable',
    'TestTimeContractable',
    'TrainEstimateable',
    'TrainTimeContractable',
    'Experiment',
    'ExperimentState',
    'ExperimentResults',
    'PredictionRecord',
]
