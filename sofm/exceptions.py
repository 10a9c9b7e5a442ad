"""
Exceptions raised by the self-organized feature map
"""


class SOMError(Exception):
    """Base class for all map errors"""


class InvalidArgumentError(SOMError, ValueError):
    """Grid size, epoch count, dataset or parameter value is unusable"""


class DimensionMismatchError(SOMError, ValueError):
    """Pattern or dataset row length differs from the map dimensionality"""


class UnknownConnectionTypeError(SOMError, ValueError):
    """Connection type has no topology builder"""


class UnknownInitTypeError(SOMError, ValueError):
    """Initialization type has no weight initializer"""
