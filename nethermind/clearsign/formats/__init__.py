from .addresses import (
    REVERSE_NAME_CHAINS,
    ZERO_ADDRESS,
    get_known_address_name,
    get_sentinel_name,
    is_zero_address,
    truncate_address,
)
from .arguments import MISSING, ArgumentMap, parse_transaction_value
from .formatter import FieldFormatter, format_duration, format_raw, format_unit
from .tokens import (
    INFINITE_THRESHOLD,
    NATIVE_TOKEN_ADDRESS,
    TokenInfo,
    format_amount,
    get_known_token,
    get_native_currency,
    is_infinite_approval,
)
