"""
Interfaces package for iriskit.

This package contains abstract base classes that define the core interfaces
for the iriskit library. These interfaces establish contracts that concrete
implementations must follow.
"""


from iriskit.abstract_interfaces.distance import Distance
from iriskit.abstract_interfaces.estimator import Estimator
from iriskit.abstract_interfaces.extractor import Extractor
from iriskit.abstract_interfaces.metric import Metric
from iriskit.abstract_interfaces.report_generator import ReportGenerator
from iriskit.abstract_interfaces.transformer import Stateful, Transformer

__all__ = ['Distance', 'Estimator', 'Extractor', 'Metric', 'ReportGenerator', 'Stateful', 'Transformer']
