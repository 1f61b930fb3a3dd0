import logging
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from nethermind.clearsign.types import (
    DecodedField,
    Descriptor,
    FieldDefinition,
    FieldFormat,
    UndecodedArgument,
)

from .addresses import (
    REVERSE_NAME_CHAINS,
    get_known_address_name,
    get_sentinel_name,
    is_zero_address,
    truncate_address,
)
from .arguments import MISSING, ArgumentMap
from .tokens import (
    NATIVE_TOKEN_ADDRESS,
    TokenInfo,
    format_amount,
    get_known_token,
    get_native_currency,
)

if TYPE_CHECKING:
    from nethermind.clearsign.providers import ChainReader

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("clearsign").getChild("formats")

UNKNOWN_VALUE = "Unknown"

SI_PREFIXES = [(10**12, "T"), (10**9, "G"), (10**6, "M"), (10**3, "k")]


def format_raw(value: Any) -> str:
    """
    Displays a decoded value without any interpretation

    >>> format_raw([1, True, b"\\x12\\x34"])
    '[1, Yes, 0x1234]'
    """
    match value:
        case None:
            return UNKNOWN_VALUE
        case bool():
            return "Yes" if value else "No"
        case int() | Decimal():
            return str(value)
        case bytes():
            return "0x" + value.hex()
        case UndecodedArgument():
            return value.hex()
        case list() | tuple():
            return "[" + ", ".join(format_raw(v) for v in value) + "]"
        case _:
            return str(value)


def format_duration(seconds: int) -> str:
    """
    Splits a number of seconds into days, hours, minutes & seconds

    >>> format_duration(93784)
    '1d 2h 3m 4s'
    >>> format_duration(3600)
    '1h'
    """
    if seconds <= 0:
        return "0s"

    days, remainder = divmod(seconds, 86400)
    hours, remainder = divmod(remainder, 3600)
    minutes, secs = divmod(remainder, 60)

    parts = [f"{amount}{unit}" for amount, unit in [(days, "d"), (hours, "h"), (minutes, "m"), (secs, "s")] if amount]
    return " ".join(parts)


def format_unit(value: int, decimals: int = 0, base: str = "", prefix: bool = False) -> str:
    """
    Scales a value by ``decimals`` and appends the ``base`` unit.  With ``prefix``, large values are displayed with
    an SI prefix.

    >>> format_unit(2500, decimals=2, base="%")
    '25%'
    >>> format_unit(1_500_000, base="W", prefix=True)
    '1.5 MW'
    """
    si_prefix = ""
    if prefix:
        scaled = abs(value) // 10**decimals
        for factor, symbol in SI_PREFIXES:
            if scaled >= factor:
                decimals += len(str(factor)) - 1
                si_prefix = symbol
                break

    amount = format_amount(value, decimals)
    if si_prefix or (base and len(base) > 1):
        return f"{amount} {si_prefix}{base}".rstrip()
    return f"{amount}{base}"


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


class FieldFormatter:
    """
    Applies descriptor field definitions to decoded arguments.  Every :class:`FieldFormat` has exactly one
    formatting strategy.  When a value does not fit its declared format, the raw display is used instead.

    Token metadata & reverse names are read through an optional chain reader.  Reader failures are logged and
    formatting continues with the static tables.
    """

    chain_reader: "ChainReader | None"
    reverse_name_chains: frozenset[int]

    def __init__(
        self,
        chain_reader: "ChainReader | None" = None,
        reverse_name_chains: frozenset[int] | set[int] = REVERSE_NAME_CHAINS,
    ):
        self.chain_reader = chain_reader
        self.reverse_name_chains = frozenset(reverse_name_chains)

    async def format_field(
        self,
        field_def: FieldDefinition,
        args: ArgumentMap,
        descriptor: Descriptor | None = None,
    ) -> DecodedField:
        """
        Resolves the field path and formats the value.

        :param field_def: field definition from a descriptor, or an inferred definition
        :param args: argument map of the decoded call
        :param descriptor: descriptor owning the field, used for enum tables
        """
        value = args.resolve(field_def.path)
        raw_value = None if value is MISSING else value

        if raw_value is None:
            display = UNKNOWN_VALUE
        elif isinstance(raw_value, UndecodedArgument):
            display = raw_value.hex()
        else:
            display = await self.format_value(field_def, raw_value, args, descriptor)

        return DecodedField(
            label=field_def.label,
            value=display,
            raw_value=raw_value,
            path=field_def.path,
            format=field_def.format,
        )

    async def format_value(
        self,
        field_def: FieldDefinition,
        value: Any,
        args: ArgumentMap,
        descriptor: Descriptor | None = None,
    ) -> str:
        """Dispatches to the formatting strategy of the field format"""
        params = field_def.params
        match field_def.format:
            case FieldFormat.raw:
                return format_raw(value)
            case FieldFormat.tokenAmount:
                return await self.format_token_amount(value, field_def, args)
            case FieldFormat.addressName:
                return await self.format_address_name(value, args.tx.chain_id)
            case FieldFormat.date:
                return self.format_date(value, params.get("encoding", "timestamp"))
            case FieldFormat.duration:
                seconds = _as_int(value)
                return format_duration(seconds) if seconds is not None else format_raw(value)
            case FieldFormat.unit:
                amount = _as_int(value)
                if amount is None:
                    return format_raw(value)
                return format_unit(
                    amount,
                    decimals=int(params.get("decimals", 0)),
                    base=str(params.get("base", "")),
                    prefix=bool(params.get("prefix", False)),
                )
            case FieldFormat.enum:
                return self.format_enum(value, params.get("$ref"), descriptor)
            case FieldFormat.nftName:
                return await self.format_nft_name(value, params, args)
            case FieldFormat.calldata:
                return self.format_calldata(value, params, args)
            case _:
                raise NotImplementedError(f"No formatting strategy for {field_def.format}")

    async def get_token_info(self, chain_id: int, token_address: str) -> TokenInfo | None:
        """Looks up token metadata in the known token table, then through the chain reader"""
        if token_address.lower() == NATIVE_TOKEN_ADDRESS:
            return get_native_currency(chain_id)

        token = get_known_token(chain_id, token_address)
        if token is not None or self.chain_reader is None:
            return token

        try:
            return await self.chain_reader.token_metadata(chain_id, token_address)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            logger.debug(f"Token metadata read failed for {token_address}: {exc}")
            return None

    async def format_token_amount(self, value: Any, field_def: FieldDefinition, args: ArgumentMap) -> str:
        """
        Scales a raw amount by the decimals of its token.  The token is taken from ``params.tokenPath``,
        ``params.token`` or the transaction destination, in that order.  Amounts read from ``@.value``, and tokens
        equal to the native sentinel or to ``params.nativeCurrencyAddress``, use the native currency of the chain.
        """
        amount = _as_int(value)
        if amount is None:
            return format_raw(value)

        params = field_def.params
        chain_id = args.tx.chain_id

        threshold = self._threshold(params.get("threshold"), args)
        if threshold is not None and amount >= threshold and params.get("message"):
            return str(params["message"])

        token_address: Any = None
        if params.get("tokenPath"):
            token_address = args.resolve(params["tokenPath"])
        elif params.get("token"):
            token_address = params["token"]
        else:
            token_address = args.tx.to

        native_addresses = params.get("nativeCurrencyAddress") or []
        if isinstance(native_addresses, str):
            native_addresses = [native_addresses]

        token: TokenInfo | None = None
        if field_def.path == "@.value" or (
            isinstance(token_address, str)
            and token_address.lower() in {NATIVE_TOKEN_ADDRESS, *(a.lower() for a in native_addresses)}
        ):
            token = get_native_currency(chain_id)
        elif isinstance(token_address, str) and not is_zero_address(token_address):
            token = await self.get_token_info(chain_id, token_address)

        if token is None:
            return f"{amount} (raw units)"
        return format_amount(amount, token.decimals, token.symbol)

    @staticmethod
    def _threshold(threshold: Any, args: ArgumentMap) -> int | None:
        if isinstance(threshold, str) and threshold.startswith("$."):
            threshold = args.resolve(threshold)
        match threshold:
            case bool() | None:
                return None
            case int():
                return threshold
            case str() if threshold[:2].lower() == "0x":
                return int(threshold, 16)
            case str() if threshold.isdigit():
                return int(threshold)
            case _:
                return None

    async def resolve_address_name(self, address: str, chain_id: int) -> str | None:
        """
        Returns a display name for an address: sentinel labels, then the known address table, then a reverse
        name record on chains that support it.
        """
        name = get_sentinel_name(address) or get_known_address_name(chain_id, address)
        if name is not None:
            return name

        if self.chain_reader is None or chain_id not in self.reverse_name_chains:
            return None

        try:
            return await self.chain_reader.reverse_name(chain_id, address)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            logger.debug(f"Reverse name lookup failed for {address}: {exc}")
            return None

    async def format_address_name(self, value: Any, chain_id: int) -> str:
        """Displays the name of an address, or the truncated address"""
        if not isinstance(value, str):
            return format_raw(value)

        name = await self.resolve_address_name(value, chain_id)
        return name if name else truncate_address(value)

    @staticmethod
    def format_date(value: Any, encoding: str = "timestamp") -> str:
        """
        Displays a unix timestamp in local time, or a block height

        >>> FieldFormatter.format_date(19_000_000, encoding="blockheight")
        'Block #19000000'
        """
        timestamp = _as_int(value)
        if timestamp is None:
            return format_raw(value)

        match encoding:
            case "blockheight":
                return f"Block #{timestamp}"
            case "timestamp":
                try:
                    return datetime.fromtimestamp(timestamp).strftime("%Y-%m-%d %H:%M:%S")
                except (OverflowError, OSError, ValueError):
                    return format_raw(value)
            case _:
                return format_raw(value)

    @staticmethod
    def format_enum(value: Any, enum_ref: str | None, descriptor: Descriptor | None) -> str:
        """Looks up the display name of an enum value in the descriptor metadata"""
        enums = descriptor.metadata.enums if descriptor and descriptor.metadata else None
        if not enums or not enum_ref:
            return format_raw(value)

        table = enums.get(enum_ref.rsplit(".", 1)[-1]) or {}
        return table.get(str(value), format_raw(value))

    async def format_nft_name(self, value: Any, params: dict[str, Any], args: ArgumentMap) -> str:
        """Displays a token id, prefixed with the collection name when ``params.collectionPath`` resolves"""
        token_id = _as_int(value)
        if token_id is None:
            return format_raw(value)

        collection = args.resolve(params["collectionPath"]) if params.get("collectionPath") else MISSING
        if not isinstance(collection, str):
            return f"#{token_id}"

        name = await self.resolve_address_name(collection, args.tx.chain_id)
        return f"{name or truncate_address(collection)} #{token_id}"

    @staticmethod
    def format_calldata(value: Any, params: dict[str, Any], args: ArgumentMap) -> str:
        """Summarizes an embedded call by its destination & size"""
        if not isinstance(value, bytes):
            return format_raw(value)

        callee = args.resolve(params["calleePath"]) if params.get("calleePath") else args.tx.to
        if not isinstance(callee, str):
            return f"Embedded call ({len(value)} bytes)"
        return f"Call to {truncate_address(callee)} ({len(value)} bytes)"
