from dataclasses import dataclass, asdict


@dataclass(frozen=True)
class Region:
    """Sub-national administrative region (ISO 3166-2 style code)."""

    code: str
    local_code: str = ""
    name: str = ""
    country: str = ""  # advisory reference to Country.code

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> 'Region':
        known_fields = {field for field in cls.__dataclass_fields__}
        return cls(**{k: v for k, v in data.items() if k in known_fields})
