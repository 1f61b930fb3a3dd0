from nethermind.clearsign.config import SignerConfig
from nethermind.clearsign.exceptions import (
    DecodingError,
    DescriptorValidationError,
    ExternalLookupFailure,
    MalformedCalldata,
)
from nethermind.clearsign.signer import ClearSigner
from nethermind.clearsign.types import (
    Confidence,
    DecodedField,
    DecodedTransaction,
    DecodingSource,
    Descriptor,
    FieldFormat,
    SecurityWarning,
    Severity,
    TransactionInput,
)
