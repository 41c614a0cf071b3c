"""Action descriptors: compiled, cached metadata for interface methods."""

from .builder import DescriptorRegistry, api_methods, build_action_descriptor
from .descriptor import ActionDescriptor, ActionIdentity, ParameterDescriptor, ReturnDescriptor

__all__ = [
    "ActionDescriptor", "ActionIdentity", "ParameterDescriptor", "ReturnDescriptor",
    "DescriptorRegistry", "api_methods", "build_action_descriptor",
]
