from .builtin import BUILTIN_DESCRIPTORS, ERC20_DESCRIPTOR, ERC721_DESCRIPTOR, WETH_DESCRIPTOR
from .community import CommunityRegistry
from .index import DescriptorIndex
from .validation import ValidationIssue, ValidationResult, validate_descriptor
