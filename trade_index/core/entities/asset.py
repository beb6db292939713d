from pydantic import BaseModel, ConfigDict, model_validator
from typing import Literal, Optional

AssetType = Literal["native", "credit_alphanum4", "credit_alphanum12"]

_CODE_LENGTHS = {
    "credit_alphanum4": (1, 4),
    "credit_alphanum12": (5, 12),
}


class Asset(BaseModel):
    """
    An asset identifier as it appears on either side of a trade.
    Native assets carry no code or issuer.
    """
    model_config = ConfigDict(frozen=True)

    asset_type: AssetType
    code: Optional[str] = None
    issuer: Optional[str] = None

    @model_validator(mode="after")
    def _check_shape(self) -> "Asset":
        if self.asset_type == "native":
            if self.code or self.issuer:
                raise ValueError("native asset takes no code or issuer")
            return self

        if not self.code or not self.issuer:
            raise ValueError(f"{self.asset_type} asset needs both code and issuer")
        low, high = _CODE_LENGTHS[self.asset_type]
        if not (low <= len(self.code) <= high) or not (self.code.isascii() and self.code.isalnum()):
            raise ValueError(f"code '{self.code}' is not a valid {self.asset_type} code")
        return self

    @classmethod
    def native(cls) -> "Asset":
        return cls(asset_type="native")

    @classmethod
    def credit(cls, code: str, issuer: str) -> "Asset":
        asset_type = "credit_alphanum4" if len(code) <= 4 else "credit_alphanum12"
        return cls(asset_type=asset_type, code=code, issuer=issuer)

    def as_details(self, prefix: str) -> dict:
        """Flattens into the `{prefix}asset_type/code/issuer` keys used in effect details."""
        out = {f"{prefix}asset_type": self.asset_type}
        if self.asset_type != "native":
            out[f"{prefix}asset_code"] = self.code
            out[f"{prefix}asset_issuer"] = self.issuer
        return out
