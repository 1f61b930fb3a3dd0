from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class AbiParameter:
    """
    Single named parameter of a function, as found in a JSON ABI or in a human-readable signature.  Tuple
    parameters carry their components, so parameter names are available for nested struct paths.
    """

    name: str
    type: str
    components: tuple["AbiParameter", ...] = field(default_factory=tuple)

    @classmethod
    def from_abi(cls, abi_param: dict[str, Any]) -> "AbiParameter":
        """Builds an AbiParameter from a JSON ABI input/output entry"""
        return cls(
            name=abi_param.get("name") or "",
            type=abi_param["type"],
            components=tuple(cls.from_abi(c) for c in abi_param.get("components") or []),
        )

    @property
    def is_tuple(self) -> bool:
        """True if the parameter is a struct, or an array of structs"""
        return self.type.startswith("tuple") or self.type.startswith("(")

    @property
    def is_array(self) -> bool:
        """True if the outermost type is an array"""
        return self.type.endswith("]")

    def canonical_type(self) -> str:
        """
        Returns the canonical type string for the parameter, collapsing tuple components into parenthesized
        lists

        >>> pair = AbiParameter("pair", "tuple[]", (AbiParameter("a", "address"), AbiParameter("b", "uint256")))
        >>> pair.canonical_type()
        '(address,uint256)[]'
        """
        if not self.is_tuple or not self.components:
            return self.type

        inner = ",".join(c.canonical_type() for c in self.components)
        # Whatever follows the tuple keyword or the closing paren holds the array dims
        if self.type.startswith("tuple"):
            array_dims = self.type[5:]
        else:
            array_dims = self.type[self.type.rfind(")") + 1 :]
        return f"({inner}){array_dims}"
