"""
Domain package.
"""

from .entities import *
from .events import *
from .exceptions import *
from .value_objects import *
