from .abi import AbiParameter
from .decoding import (
    Confidence,
    DecodedField,
    DecodedTransaction,
    DecodingSource,
    RawCall,
    RawDecoded,
    SecurityWarning,
    Severity,
    TransactionInput,
    TransactionMetadata,
    UndecodedArgument,
)
from .descriptor import (
    ContractDeployment,
    Descriptor,
    DescriptorContext,
    DescriptorMetadata,
    FieldDefinition,
    FieldFormat,
    FormatMatch,
    FunctionFormat,
)
