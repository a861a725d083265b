"""
Pydantic schemas for request/response models
"""

from .engagement import *
from .video import *
