from .kernel import Kernel, axis_index
from .profiles import KERNEL_TYPES
