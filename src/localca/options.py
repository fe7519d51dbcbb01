from typing import Optional

from pydantic import BaseModel, Field


class RootOptions(BaseModel):
    """Settings that only take effect when a new root is generated."""

    country: str = ""
    organization: str = ""
    organizational_unit: str = ""
    common_name: str = ""
    years: int = Field(default=0, ge=0)
    use_rsa: bool = False
    force_new: bool = False

    def has_custom_subject(self) -> bool:
        return bool(self.years or self.country or self.organization or self.organizational_unit or self.common_name)


class LifetimeOptions(BaseModel):
    days: int = Field(default=0, ge=0)
    months: int = Field(default=0, ge=0)
    years: int = Field(default=0, ge=0)


class CertOptions(LifetimeOptions):
    client: bool = False
    use_rsa: bool = False
    pkcs12: bool = False
    cert_file: Optional[str] = None
    key_file: Optional[str] = None
    p12_file: Optional[str] = None
    output_dir: str = "."


class IntermediateOptions(LifetimeOptions):
    common_name: str = ""
    use_rsa: bool = False
    output_dir: str = "."


class CSROptions(LifetimeOptions):
    client: bool = False
    cert_file: Optional[str] = None
    output_dir: str = "."
